import asyncio
import tempfile
from pathlib import Path

from hypothesis import given, settings
from hypothesis import strategies as st

from reformmap.core.color_projector import DEFAULT_COLOR, DEFAULT_PALETTE, project
from reformmap.core.registry_service import RegistryService, SubmitEventInput
from reformmap.db.store import JSONFileEventStore
from reformmap.models.events import ReformEvent, ReformType
from tests.support.registry_helpers import ADMIN_EMAIL, RecordingUploader, StaticAuthenticator

country_codes = st.sampled_from(["FRA", "DEU", "ITA", "BRA", "ARG"])
years = st.integers(min_value=-50, max_value=50)
reform_types = st.sampled_from([member.value for member in ReformType])

submissions = st.lists(
    st.tuples(country_codes, years, reform_types, st.text(max_size=10)),
    max_size=25,
)


async def _apply(
    store: JSONFileEventStore, batch: list[tuple[str, int, str, str]]
) -> RegistryService:
    service = RegistryService(store, StaticAuthenticator(), RecordingUploader())
    for country_code, year, type_, title in batch:
        await service.submit(
            ADMIN_EMAIL,
            SubmitEventInput(country_code=country_code, year=year, type=type_, title=title),
        )
    return service


@settings(max_examples=40, deadline=None)
@given(submissions)
def test_store_holds_one_event_per_key_with_last_write(batch: list[tuple[str, int, str, str]]) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = JSONFileEventStore(Path(tmp) / "events.json")
        asyncio.run(_apply(store, batch))
        stored = asyncio.run(store.list_all())

    keys = [event.key for event in stored]
    assert len(keys) == len(set(keys))

    expected: dict[str, tuple[str, str]] = {}
    for country_code, year, type_, title in batch:
        expected[f"{country_code}:{year}"] = (type_, title)
    assert {event.key: (event.type, event.title) for event in stored} == expected


@settings(max_examples=40, deadline=None)
@given(submissions, years)
def test_list_by_year_returns_exactly_that_year(
    batch: list[tuple[str, int, str, str]], year: int
) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = JSONFileEventStore(Path(tmp) / "events.json")
        asyncio.run(_apply(store, batch))
        everything = asyncio.run(store.list_all())
        scoped = asyncio.run(store.list_by_year(year))

    assert all(event.year == year for event in scoped)
    assert sorted(event.key for event in scoped) == sorted(
        event.key for event in everything if event.year == year
    )


events = st.lists(
    st.tuples(country_codes, years, st.one_of(reform_types, st.text(max_size=8))).map(
        lambda fields: ReformEvent(country_code=fields[0], year=fields[1], type=fields[2])
    ),
    max_size=20,
)


@given(events)
def test_projection_is_deterministic_and_total(batch: list[ReformEvent]) -> None:
    first = project(batch)
    assert first == project(batch)
    assert set(first) == {event.country_code for event in batch}
    for color in first.values():
        assert color in DEFAULT_PALETTE.values() or color == DEFAULT_COLOR
