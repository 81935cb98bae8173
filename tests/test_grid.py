from siv.cells import Cell, row_values
from siv.grid import apply_banner, assemble_grid, format_grid, longest_row_length
from siv.models import Entity, EntityKind, Predicate, TypeRepr


INT = TypeRepr.named("Int")


def _rows(grid):
    return [row_values(row) for row in grid]


def _var(name):
    return Entity(name=name, kind=EntityKind.VAR, predicates=(Predicate(name="HAS", arguments=(INT,)),))


def _takes(name, count):
    return Entity(
        name=name,
        kind=EntityKind.FUNCTION,
        predicates=(Predicate(name="TAKES", arguments=(INT,) * count),),
    )


def test_empty_file_is_one_blank_row():
    assert assemble_grid([]) == [[]]


def test_leading_blank_row_then_entities():
    grid = assemble_grid([_var("x")], banner=False)
    assert _rows(grid) == [
        [],
        ["x", "IS", "VAR"],
        [],
        ["", "x", "HAS", "Int"],
        [],
    ]


def test_banner_fills_the_top_right_corner():
    grid = assemble_grid([_var("x"), _takes("f", 3)])
    assert longest_row_length(grid) == 8
    assert _rows(grid[:3]) == [
        [""] * 7 + ["SOURCE"],
        ["x", "IS", "VAR", "", "", "", "", "IS"],
        [""] * 7 + ["VIEW"],
    ]
    assert _rows(grid[3:]) == [
        ["", "x", "HAS", "Int"],
        [],
        ["f", "IS", "FUNC"],
        [],
        ["", "f", "TAKES", "Int", "AND", "Int", "AND", "Int"],
        [],
    ]


def test_banner_needs_room_in_the_first_four_rows():
    grid = assemble_grid([_var("x"), _takes("f", 1)])
    assert longest_row_length(grid) == 4
    assert grid == assemble_grid([_var("x"), _takes("f", 1)], banner=False)


def test_banner_needs_three_rows():
    grid = [[], [Cell("a"), Cell("b"), Cell("c"), Cell("d")]]
    assert apply_banner(grid) == grid


def test_function_scenario_has_no_banner():
    add = Entity(
        name="add",
        kind=EntityKind.FUNCTION,
        predicates=(
            Predicate(name="TAKES", arguments=(INT, INT)),
            Predicate(name="RETURN", arguments=(INT,)),
        ),
    )
    assert format_grid(assemble_grid([add])).split("\n") == [
        "",
        "ADD    IS     FUNC",
        "",
        "       ADD    TAKES  INT    AND    INT",
        "",
        "       ADD    RETURN INT",
        "",
    ]


def test_format_grid_with_explicit_width():
    grid = [[Cell("a"), Cell(""), Cell("bc")], []]
    assert format_grid(grid, width=2) == "A     BC\n"
