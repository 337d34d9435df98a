import pytest

from conftest import body, light
from lifxcli.errors import DecodeError
from lifxcli.listing import HEADERS, build_listing, decode_lights, project_rows, sort_by_group


def test_empty_array_yields_no_rows() -> None:
    assert build_listing(b"[]") == []


@pytest.mark.parametrize("raw", [b"", b"not json", b'{"error":"rate limited"}', b"[1, 2]"])
def test_bad_body_raises_decode_error(raw: bytes) -> None:
    with pytest.raises(DecodeError) as exc:
        decode_lights(raw)
    assert exc.value.body == raw


def test_sort_by_group_is_stable() -> None:
    lights = decode_lights(body([
        light("1", "Kitchen"),
        light("2", "Bedroom"),
        light("3", "Kitchen"),
        light("4", "Bedroom"),
    ]))
    ordered = sort_by_group(lights)
    assert [l.id for l in ordered] == ["2", "4", "1", "3"]


def test_sort_is_idempotent() -> None:
    lights = decode_lights(body([light("1", "b"), light("2", "a"), light("3", "b"), light("4", "")]))
    once = sort_by_group(lights)
    assert sort_by_group(once) == once
    # records without a group sort first
    assert once[0].id == "4"


def test_rows_are_formatted_and_indexed_after_sort() -> None:
    rows = build_listing(body([
        light("d073d5000002", "Office", power="off", brightness=1, color={"hue": 0, "saturation": 0.25, "kelvin": 2700.4}),
        light("d073d5000001", "Lounge", brightness=0.333, color={"hue": 250.5, "saturation": 0.5, "kelvin": 3500}),
    ]))
    assert len(HEADERS) == 9
    assert list(rows[0]) == ["0", "d073d5000001", "Bulb d073d5000001", "Lounge", "on", "0.33", "250.50", "3500", "0.5"]
    assert list(rows[1]) == ["1", "d073d5000002", "Bulb d073d5000002", "Office", "off", "1.00", "0.00", "2700", "0.2"]


def test_project_rows_missing_fields() -> None:
    rows = project_rows(decode_lights(b'[{"id": "x"}]'))
    assert list(rows[0]) == ["0", "x", "", "", "", "0.00", "0.00", "0", "0.0"]
