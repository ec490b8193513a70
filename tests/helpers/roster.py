from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from rostersync.domain.model import (
    AccessRole,
    ActiveMember,
    Division,
    LinkedAccount,
    Rank,
    Region,
    RoleAssignment,
    RosterRecord,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.orm import Session

NORTH = "Regional Norte"
SOUTH = "Regional Sul"
SUN_VALLEY = "Divisão Vale do Sol"
HIGHLANDS = "Divisão Serra"
COAST = "Divisão Litoral"
SOLDIER = "Soldado (Grau X)"


def make_record(external_id: int | None, name: str | None = None, **overrides: Any) -> RosterRecord:
    values: dict[str, Any] = {
        "external_id": external_id,
        "name": name or f"Member {external_id}",
        "command_label": "Comando Central",
        "region_label": NORTH,
        "division_label": SUN_VALLEY,
        "rank_label": SOLDIER,
        "has_motorcycle": True,
        "entry_date": date(2020, 5, 17),
    }
    values.update(overrides)
    return RosterRecord(**values)


def make_member(external_id: int, name: str | None = None, **overrides: Any) -> ActiveMember:
    member_fields = {
        key: overrides.pop(key)
        for key in (
            "active",
            "linked_account_id",
            "region_id",
            "division_id",
            "rank_id",
            "notes",
        )
        if key in overrides
    }
    member = ActiveMember.from_record(make_record(external_id, name, **overrides))
    for key, value in member_fields.items():
        setattr(member, key, value)
    return member


def region_members(count: int, *, start: int = 1000, region: str = NORTH) -> list[ActiveMember]:
    return [make_member(start + offset, region_label=region) for offset in range(count)]


@dataclass(slots=True)
class Catalog:
    north: Region
    south: Region
    sun_valley: Division
    highlands: Division
    coast: Division
    regional_director: Rank
    division_director: Rank
    soldier: Rank

    @property
    def regions(self) -> list[Region]:
        return [self.north, self.south]

    @property
    def divisions(self) -> list[Division]:
        return [self.sun_valley, self.highlands, self.coast]

    @property
    def ranks(self) -> list[Rank]:
        return [self.regional_director, self.division_director, self.soldier]


def build_catalog() -> Catalog:
    north = Region(name=NORTH, ascii_name=NORTH)
    south = Region(name=SOUTH, ascii_name=SOUTH)
    return Catalog(
        north=north,
        south=south,
        sun_valley=Division(name=SUN_VALLEY, ascii_name="Divisao Vale do Sol", region_id=north.id),
        highlands=Division(name=HIGHLANDS, ascii_name="Divisao Serra", region_id=north.id),
        coast=Division(name=COAST, ascii_name="Divisao Litoral", region_id=south.id),
        regional_director=Rank(name="Diretor Regional (Grau V)", grade="V"),
        division_director=Rank(name="Diretor de Divisão (Grau VI)", grade="VI"),
        soldier=Rank(name=SOLDIER, grade="X"),
    )


def seed_catalog(session: Session) -> Catalog:
    catalog = build_catalog()
    session.add_all(catalog.regions)
    session.flush()
    session.add_all([*catalog.divisions, *catalog.ranks])
    session.commit()
    return catalog


def seed_admin(session: Session, *, display_name: str = "Admin") -> UUID:
    account = LinkedAccount(display_name=display_name)
    session.add(account)
    session.flush()
    session.add(RoleAssignment(account_id=account.id, role=AccessRole.ADMIN))
    session.commit()
    return account.id


def seed_members(session: Session, members: Iterable[ActiveMember]) -> None:
    session.add_all(list(members))
    session.commit()


@dataclass(slots=True)
class FakeCatalog:
    regions: list[Region]
    divisions: list[Division]
    ranks: list[Rank] = field(default_factory=list)
    list_calls: int = 0

    @classmethod
    def from_catalog(cls, catalog: Catalog) -> FakeCatalog:
        return cls(regions=catalog.regions, divisions=catalog.divisions, ranks=catalog.ranks)

    def list_regions(self) -> list[Region]:
        self.list_calls += 1
        return list(self.regions)

    def list_divisions(self) -> list[Division]:
        self.list_calls += 1
        return list(self.divisions)

    def get_region(self, region_id: UUID) -> Region | None:
        return next((r for r in self.regions if r.id == region_id), None)

    def get_division(self, division_id: UUID) -> Division | None:
        return next((d for d in self.divisions if d.id == division_id), None)

    def get_rank(self, rank_id: UUID) -> Rank | None:
        return next((r for r in self.ranks if r.id == rank_id), None)


@dataclass(slots=True)
class StaticAuthorizer:
    allowed: bool = True
    calls: list[UUID] = field(default_factory=list)

    def is_admin(self, operator_id: UUID) -> bool:
        self.calls.append(operator_id)
        return self.allowed


def random_operator() -> UUID:
    return uuid4()
