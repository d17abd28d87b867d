from aha_cli.navigation.hierarchy import SelectableList
from aha_cli.tui import render_list


def test_selected_row_is_marked():
    items = SelectableList([("Web", 1), ("Mobile", 2)])
    items.next()
    assert render_list(items).plain == ">Web\n Mobile\n"


def test_empty_list_renders_nothing():
    assert render_list(SelectableList()).plain == ""
