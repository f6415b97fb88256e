import pytest

from parkmap.mapstate.modes import Mode
from parkmap.mapstate.popups import EntityIntent, facility_popup, format_area
from parkmap.mapstate.render import MapRenderer
from parkmap.mapstate.surface import MapSurface
from parkmap.schemas.district import DistrictOut
from parkmap.schemas.facility import FacilityOut
from parkmap.schemas.park import ParkOut


@pytest.fixture
def entities(square):
    district = DistrictOut(id=1, name="Central", geometry=square(0, 0, 1), area=1.23e10)
    park = ParkOut(id=10, name="Park <One>", geometry=square(0.1, 0.1), district_id=1, balance_holder="City")
    facility = FacilityOut(
        id=100, name="Swings", type="CHILD_PLAYGROUND", latitude=0.105, longitude=0.105, park_id=10,
        contract_with="OOO Service", contract_term="[2024-01-01,2025-01-01)",
    )
    return [district], [park], [facility]


def render(renderer, entities, mode=Mode.IDLE):
    districts, parks, facilities = entities
    renderer.render(districts, parks, facilities, mode=mode)


def test_layers_are_stacked_districts_parks_facilities():
    surface = MapSurface()
    renderer = MapRenderer(surface)
    assert [l.name for l in surface.layers] == ["districts", "parks", "facilities"]
    assert renderer.facilities.clustered


def test_render_rebuilds_layers(entities):
    renderer = MapRenderer(MapSurface())
    render(renderer, entities)
    render(renderer, entities)
    assert len(renderer.districts.features) == 1
    assert len(renderer.parks.features) == 1
    [marker] = renderer.facilities.features
    assert marker["geometry"] == {"type": "Point", "coordinates": [0.105, 0.105]}

    renderer.render([], [], [])
    assert renderer.facilities.to_geojson() == {"type": "FeatureCollection", "features": []}


def test_public_popups_have_no_actions(entities):
    renderer = MapRenderer(MapSurface(), admin=False)
    render(renderer, entities)
    popup = renderer.parks.features[0]["properties"]["popup"]
    assert popup["actions"] == []
    assert "data-action" not in popup["html"]
    # HTML はエスケープされる
    assert "Park &lt;One&gt;" in popup["html"]


def test_admin_popups_carry_edit_and_delete(entities):
    renderer = MapRenderer(MapSurface(), admin=True)
    render(renderer, entities)
    popup = renderer.districts.features[0]["properties"]["popup"]
    assert popup["actions"] == [
        {"action": "edit", "kind": "district", "id": 1},
        {"action": "delete", "kind": "district", "id": 1},
    ]
    assert 'data-action="delete" data-kind="district" data-id="1"' in popup["html"]


def test_popups_suppressed_while_placing_facility(entities):
    renderer = MapRenderer(MapSurface(), admin=True)
    render(renderer, entities, mode=Mode.PLACING_FACILITY)
    for layer in (renderer.districts, renderer.parks, renderer.facilities):
        assert all(f["properties"]["popup"] is None for f in layer.features)


def test_dispatch_emits_intent():
    renderer = MapRenderer(MapSurface(), admin=True)
    seen = []
    renderer.events.on("intent", seen.append)
    renderer.dispatch("delete", "park", "10")
    assert seen == [EntityIntent("delete", "park", 10)]

    with pytest.raises(ValueError):
        renderer.dispatch("explode", "park", 10)


def test_dispatch_requires_admin():
    renderer = MapRenderer(MapSurface(), admin=False)
    with pytest.raises(PermissionError):
        renderer.dispatch("edit", "park", 10)


def test_facility_popup_shows_contract_window(entities):
    _, [park], [facility] = entities
    html = facility_popup(facility, park).html
    assert "Детская площадка" in html
    assert "01.01.2024 – 31.12.2024" in html
    assert "OOO Service" in html

    no_contract = facility.model_copy(update={"contract_term": None})
    html = facility_popup(no_contract, park).html
    assert "Срок договора" not in html
    # 取引先は期間がなくても表示する
    assert "OOO Service" in html

    bare = no_contract.model_copy(update={"contract_with": None})
    assert "Контрагент" not in facility_popup(bare, park).html


def test_format_area():
    assert format_area(None) == ""
    assert format_area(950.4) == "950 м²"
    assert format_area(25_000) == "2.50 га"
