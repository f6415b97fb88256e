# backend/parkmap/mapstate/popups.py
from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import List, Optional, Tuple

from parkmap.schemas.district import DistrictOut
from parkmap.schemas.facility import FacilityOut
from parkmap.schemas.park import ParkOut
from parkmap.services.contract.term import format_contract_term

FACILITY_TYPE_LABELS = {
    "SPORTS_PLAYGROUND": "Спортивная площадка",
    "CHILD_PLAYGROUND": "Детская площадка",
    "NTO": "НТО",
    "TOILET": "Туалет",
    "CHILL": "Зона отдыха",
    "CHILDREN_ROOM": "Детская комната",
}

ACTION_LABELS = {"edit": "Редактировать", "delete": "Удалить"}


@dataclass(frozen=True)
class EntityIntent:
    action: str  # "edit" | "delete"
    kind: str  # "district" | "park" | "facility"
    entity_id: int


@dataclass(frozen=True)
class Popup:
    html: str
    actions: Tuple[EntityIntent, ...] = ()

    def to_dict(self) -> dict:
        return {
            "html": self.html,
            "actions": [
                {"action": a.action, "kind": a.kind, "id": a.entity_id} for a in self.actions
            ],
        }


def format_area(area_m2: Optional[float]) -> str:
    # 面積が不明なら空欄
    if area_m2 is None:
        return ""
    if area_m2 >= 10_000:
        return f"{area_m2 / 10_000:.2f} га"
    return f"{area_m2:.0f} м²"


def _row(label: str, value) -> str:
    if value is None or value == "":
        return ""
    return f"<div><b>{escape(label)}:</b> {escape(str(value))}</div>"


def _actions(kind: str, entity_id: int, admin: bool) -> Tuple[EntityIntent, ...]:
    if not admin:
        return ()
    return tuple(EntityIntent(action, kind, entity_id) for action in ("edit", "delete"))


def _buttons(actions: Tuple[EntityIntent, ...]) -> str:
    if not actions:
        return ""
    buttons = "".join(
        f'<button type="button" data-action="{a.action}" data-kind="{a.kind}" '
        f'data-id="{a.entity_id}">{ACTION_LABELS[a.action]}</button>'
        for a in actions
    )
    return f'<div class="popup-actions">{buttons}</div>'


def _popup(title: Optional[str], rows: List[str], actions: Tuple[EntityIntent, ...]) -> Popup:
    html = (
        '<div class="popup">'
        f"<h3>{escape(title or 'Без названия')}</h3>"
        + "".join(rows)
        + _buttons(actions)
        + "</div>"
    )
    return Popup(html=html, actions=actions)


def district_popup(district: DistrictOut, admin: bool = False) -> Popup:
    rows = [_row("Площадь", format_area(district.area))]
    return _popup(district.name, rows, _actions("district", district.id, admin))


def park_popup(park: ParkOut, district: Optional[DistrictOut] = None, admin: bool = False) -> Popup:
    rows = [
        _row("Район", district.name if district else None),
        _row("Площадь", format_area(park.area)),
        _row("Балансодержатель", park.balance_holder),
        _row("Описание", park.description),
    ]
    return _popup(park.name, rows, _actions("park", park.id, admin))


def facility_popup(facility: FacilityOut, park: Optional[ParkOut] = None, admin: bool = False) -> Popup:
    rows = [
        _row("Тип", FACILITY_TYPE_LABELS.get(facility.type or "", facility.type)),
        _row("Парк", park.name if park else None),
        _row("Описание", facility.description),
        _row("Площадь", facility.area),
        _row("Количество МАФ", facility.maf_count),
        _row("Покрытие", facility.type_coverage),
    ]
    if facility.photo:
        rows.insert(0, f'<img class="popup-photo" src="{escape(facility.photo, quote=True)}" alt="">')
    rows.append(_row("Контрагент", facility.contract_with))
    rows.append(_row("Действие по договору", facility.contract_action))
    # 期間が空なら日付行は出さない
    term = format_contract_term(facility.contract_term)
    if term:
        rows.append(_row("Срок договора", f"{term[0]} – {term[1]}"))
    return _popup(facility.name, rows, _actions("facility", facility.id, admin))
