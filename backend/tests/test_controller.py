import pytest

from parkmap.mapstate.controller import MapController
from parkmap.mapstate.forms import DistrictForm, FacilityForm, ParkForm
from parkmap.mapstate.modes import Mode


def draw(ctrl: MapController, lng: float, lat: float, size: float = 0.01) -> None:
    for v_lat, v_lng in ((lat, lng), (lat, lng + size), (lat + size, lng + size), (lat + size, lng)):
        assert ctrl.modes.add_vertex(v_lat, v_lng)
    assert ctrl.modes.finish_draw()


async def add_district(ctrl, name, lng, lat, size=0.1):
    ctrl.start_district_draw()
    draw(ctrl, lng, lat, size)
    assert isinstance(ctrl.active_form, DistrictForm)
    ctrl.active_form.name = name
    return await ctrl.submit_form()


async def add_park(ctrl, name, lng, lat, size=0.01):
    ctrl.start_park_draw()
    draw(ctrl, lng, lat, size)
    assert isinstance(ctrl.active_form, ParkForm)
    ctrl.active_form.name = name
    return await ctrl.submit_form()


async def add_facility(ctrl, name, lat, lng, facility_type="NTO"):
    ctrl.start_facility_placement()
    ctrl.surface.click(lat, lng)
    assert isinstance(ctrl.active_form, FacilityForm)
    ctrl.active_form.name = name
    ctrl.active_form.type = facility_type
    return await ctrl.submit_form()


def rendered_ids(layer):
    return sorted(f["properties"]["id"] for f in layer.features)


@pytest.fixture
async def ctrl(admin_api):
    controller = MapController(admin_api, admin=True)
    await controller.load()
    return controller


async def test_drawn_district_is_saved_and_shown(ctrl):
    district = await add_district(ctrl, "Central", 37.5, 55.7)

    assert ctrl.mode is Mode.IDLE
    assert ctrl.active_form is None
    assert district.area > 0
    assert rendered_ids(ctrl.renderer.districts) == [district.id]
    assert district.id in ctrl.filters.selected_districts
    # スケッチ用レイヤーは残らない
    assert [l.name for l in ctrl.surface.layers] == ["districts", "parks", "facilities"]


async def test_park_and_facility_are_associated_automatically(ctrl):
    district = await add_district(ctrl, "Central", 37.5, 55.7)
    park = await add_park(ctrl, "Gorky", 37.52, 55.72)
    assert park.district_id == district.id

    facility = await add_facility(ctrl, "Kiosk", 55.725, 37.525)
    assert facility.park_id == park.id
    assert rendered_ids(ctrl.renderer.facilities) == [facility.id]


async def test_geometry_survives_reload(ctrl, admin_api):
    park = await add_park(ctrl, "Gorky", 37.52, 55.72)

    reloaded = MapController(admin_api, admin=True)
    await reloaded.load()
    assert reloaded.store.park(park.id).geometry == park.geometry
    assert reloaded.store.park(park.id).geometry.coordinates[0][0] == [37.52, 55.72]


async def test_deleting_park_removes_only_its_facilities(ctrl):
    a = await add_park(ctrl, "A", 37.52, 55.72)
    b = await add_park(ctrl, "B", 37.60, 55.80)
    fa = await add_facility(ctrl, "a", 55.725, 37.525)
    fb = await add_facility(ctrl, "b", 55.805, 37.605)

    ctrl.renderer.dispatch("delete", "park", a.id)
    assert ctrl.pending_delete is not None
    assert await ctrl.confirm_delete()

    assert ctrl.pending_delete is None
    assert [p.id for p in ctrl.store.parks] == [b.id]
    assert [f.id for f in ctrl.store.facilities] == [fb.id]
    assert rendered_ids(ctrl.renderer.facilities) == [fb.id]
    assert fa.id not in [f.id for f in await ctrl.client.list_facilities()]


async def test_deleting_district_keeps_parks(ctrl):
    district = await add_district(ctrl, "Central", 37.5, 55.7)
    park = await add_park(ctrl, "Gorky", 37.52, 55.72)

    assert await ctrl.delete("district", district.id)
    assert ctrl.store.districts == []
    assert [p.id for p in ctrl.store.parks] == [park.id]
    assert rendered_ids(ctrl.renderer.parks) == [park.id]


async def test_dismissed_delete_does_nothing(ctrl):
    park = await add_park(ctrl, "Gorky", 37.52, 55.72)
    ctrl.renderer.dispatch("delete", "park", park.id)
    ctrl.dismiss_delete()
    assert not await ctrl.confirm_delete()
    assert [p.id for p in ctrl.store.parks] == [park.id]


async def test_failed_delete_alerts_and_keeps_state(admin_api):
    alerts = []
    ctrl = MapController(admin_api, admin=True, alert=alerts.append)
    await ctrl.load()
    park = await add_park(ctrl, "Gorky", 37.52, 55.72)
    renders = ctrl.render_count

    assert not await ctrl.delete("park", park.id + 100)
    assert alerts == ["Failed to delete park: park not found"]
    assert [p.id for p in ctrl.store.parks] == [park.id]
    assert ctrl.render_count == renders


async def test_edit_intent_opens_prefilled_form(ctrl):
    park = await add_park(ctrl, "Gorky", 37.52, 55.72)
    ctrl.renderer.dispatch("edit", "park", park.id)

    form = ctrl.active_form
    assert isinstance(form, ParkForm)
    assert form.name == "Gorky"
    form.name = "Gorky Park"
    updated = await ctrl.submit_form()
    assert updated.id == park.id
    assert ctrl.store.park(park.id).name == "Gorky Park"


async def test_type_filter_hides_without_touching_store(ctrl):
    await add_park(ctrl, "Gorky", 37.52, 55.72)
    kiosk = await add_facility(ctrl, "Kiosk", 55.725, 37.525, "NTO")
    toilet = await add_facility(ctrl, "WC", 55.726, 37.526, "TOILET")

    ctrl.toggle_type("NTO")
    assert rendered_ids(ctrl.renderer.facilities) == [toilet.id]
    assert len(ctrl.store.facilities) == 2

    ctrl.toggle_type("NTO")
    assert rendered_ids(ctrl.renderer.facilities) == sorted([kiosk.id, toilet.id])

    ctrl.deselect_all("types")
    assert ctrl.renderer.facilities.features == []
    ctrl.select_all("types")
    assert len(ctrl.renderer.facilities.features) == 2


async def test_popups_hidden_while_placing(ctrl):
    await add_park(ctrl, "Gorky", 37.52, 55.72)
    ctrl.start_facility_placement()
    assert ctrl.renderer.parks.features[0]["properties"]["popup"] is None
    ctrl.cancel_mode()
    assert ctrl.renderer.parks.features[0]["properties"]["popup"] is not None
    assert ctrl.surface.click_listener_count == 0


async def test_public_viewer_cannot_edit(api):
    ctrl = MapController(api)
    await ctrl.load()
    with pytest.raises(PermissionError):
        ctrl.start_district_draw()
    with pytest.raises(PermissionError):
        await ctrl.delete("park", 1)
    assert ctrl.mode is Mode.IDLE
