"""Map colouring derived from a year's reform events."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from reformmap.models.events import ReformEvent, ReformType

DEFAULT_COLOR = "#627BC1"
COUNTRY_CODE_PROPERTY = "iso_3166_1_alpha_3"

DEFAULT_PALETTE: dict[str, str] = {
    ReformType.NEW_CURRENCY.value: "#e6194b",
    ReformType.REDENOMINATION.value: "#3cb44b",
    ReformType.DECIMALIZATION.value: "#ffe119",
    ReformType.DEVALUATION.value: "#4363d8",
    ReformType.REVALUATION.value: "#f58231",
    ReformType.JOIN_EURO.value: "#911eb4",
    ReformType.LEAVE_EURO.value: "#46f0f0",
    ReformType.DOLLARIZATION.value: "#f032e6",
    ReformType.DE_DOLLARIZATION.value: "#bcf60c",
    ReformType.PEG_CHANGE.value: "#fabebe",
    ReformType.CURRENCY_BOARD.value: "#008080",
    ReformType.MONETARY_UNION.value: "#e6beff",
    ReformType.EXIT_UNION.value: "#9a6324",
    ReformType.GOLD_STANDARD.value: "#fffac8",
    ReformType.ABANDON_GOLD.value: "#800000",
    ReformType.BANKNOTES_REDESIGN.value: "#aaffc3",
    ReformType.EXCHANGE_REGIME_CHANGE.value: "#808000",
    ReformType.CRYPTOCURRENCY.value: "#ffd8b1",
    ReformType.INSTITUTION_REFORM.value: "#000075",
    ReformType.OTHER.value: "#808080",
}


def project(
    events: Iterable[ReformEvent],
    palette: Mapping[str, str] = DEFAULT_PALETTE,
    default_color: str = DEFAULT_COLOR,
) -> dict[str, str]:
    """Return ``country_code -> color``; unknown types get ``default_color``.

    A repeated country code takes the colour of its last event in input order.
    """
    colors: dict[str, str] = {}
    for event in events:
        colors[event.country_code] = palette.get(event.type, default_color)
    return colors


def fill_color_expression(
    colors: Mapping[str, str],
    default_color: str = DEFAULT_COLOR,
    property_name: str = COUNTRY_CODE_PROPERTY,
) -> list[Any]:
    """Build the renderer's ``match`` fill expression for a projection.

    With no coloured countries the plain default colour is returned, since a
    ``match`` expression needs at least one label.
    """
    if not colors:
        return ["literal", default_color]
    expression: list[Any] = ["match", ["get", property_name]]
    for country_code in sorted(colors):
        expression.extend([country_code, colors[country_code]])
    expression.append(default_color)
    return expression
