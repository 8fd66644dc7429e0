"""Deterministic demo data: five German offices and employees clustered near them."""

from __future__ import annotations

from faker import Faker

from officegeo.common.ids import new_record_id
from officegeo.common.models import Coordinate, Employee, GeocodeAccuracy, GeocodeStatus, Office
from officegeo.geocoding.local import LocalGeocoder
from officegeo.pipeline.distance import calculate_distance

SEED_OFFICES = (
    ("Frankfurt HQ", "60311", "Neue Mainzer Str. 52-58", "Frankfurt am Main", 50.1109, 8.6821),
    ("Berlin Office", "10117", "Unter den Linden 21", "Berlin", 52.52, 13.405),
    ("Munich Office", "80539", "Maximilianstrasse 35", "München", 48.1351, 11.582),
    ("Hamburg Office", "20354", "Jungfernstieg 7", "Hamburg", 53.5511, 9.9937),
    ("Duesseldorf Office", "40212", "Koenigsallee 60", "Düsseldorf", 51.2277, 6.7735),
)

TEAMS = ("Platform", "Frontend", "Backend", "Mobile", "DevOps", "QA", "Data", "Security")
DEPARTMENTS = ("Engineering", "Product")
ROLES = ("Developer", "Senior Developer", "Tech Lead", "Product Manager", "Designer")
NEARBY_RADIUS_KM = 50.0


def generate_seed_offices() -> list[Office]:
    return [
        Office(
            id=new_record_id(),
            name=name,
            postcode=postcode,
            street=street,
            city=city,
            coords=Coordinate(lat=lat, lon=lon),
            geocode_status=GeocodeStatus.SUCCESS,
        )
        for name, postcode, street, city, lat, lon in SEED_OFFICES
    ]


def _postcodes_near(geocoder: LocalGeocoder, lat: float, lon: float) -> list[str]:
    entries = geocoder.gazetteer.entries
    return [
        postcode
        for postcode in sorted(entries)
        if calculate_distance(lat, lon, entries[postcode].lat, entries[postcode].lon) <= NEARBY_RADIUS_KM
    ]


def generate_seed_employees(
    geocoder: LocalGeocoder | None = None,
    *,
    count: int = 45,
    seed: int = 12345,
) -> list[Employee]:
    """Build ``count`` employees whose postcodes lie within 50 km of a seed office.

    German names and streets come from a ``de_DE`` Faker seeded with ``seed``,
    so everything except the ids is reproducible; postcodes are drawn from
    the local gazetteer, never from Faker, so every employee geocodes.
    """
    geocoder = geocoder or LocalGeocoder()
    fake = Faker("de_DE")
    fake.seed_instance(seed)
    nearby = {
        name: _postcodes_near(geocoder, lat, lon) or [postcode]
        for name, postcode, _street, _city, lat, lon in SEED_OFFICES
    }

    employees: list[Employee] = []
    for _ in range(count):
        office_name = fake.random_element(SEED_OFFICES)[0]
        postcode = fake.random_element(nearby[office_name])
        located = geocoder.geocode_by_postcode(postcode)
        employees.append(
            Employee(
                id=new_record_id(),
                name=f"{fake.first_name()} {fake.last_name()}",
                postcode=postcode,
                team=fake.random_element(TEAMS),
                street=f"{fake.street_name()} {fake.building_number()}",
                city=located.city,
                department=fake.random_element(DEPARTMENTS),
                role=fake.random_element(ROLES),
                assigned_office=office_name,
                coords=located.coords,
                geocode_accuracy=GeocodeAccuracy.POSTCODE_CENTROID,
                geocode_status=GeocodeStatus.SUCCESS if located.coords else GeocodeStatus.FAILED,
            )
        )
    return employees
