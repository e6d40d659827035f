"""
Empire Kernel — Raid Variant Catalog

Static, read-only tables: villain roles / names / rarities, businesses,
troops and territories.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from .domain_types import Business, Resources, Territory, Troop, VillainBuff


VILLAIN_ROLES: Tuple[Tuple[str, VillainBuff], ...] = (
    ("Contador", VillainBuff(
        type="profit", value=0.2,
        description="Aumenta o lucro dos negócios em 20%.",
    )),
    ("Psicopata", VillainBuff(
        type="attack", value=0.25,
        description="Aumenta a força de ataque em 25%.",
    )),
    ("Diplomata", VillainBuff(
        type="influence", value=0.15,
        description="Melhora ganhos de influência política em 15%.",
    )),
    ("Sabotador", VillainBuff(
        type="defense", value=0.2,
        description="Reduz o poder defensivo rival em 20%.",
    )),
)

VILLAIN_RARITIES: Tuple[str, ...] = ("Comum", "Raro", "Épico", "Lendário")
FIRST_NAMES: Tuple[str, ...] = (
    "Luca", "Valentina", "Sergio", "Isabella", "Rafael", "Bianca",
)
LAST_NAMES: Tuple[str, ...] = (
    "Moretti", "Santoro", "Rossi", "Costa", "Bianchi", "Ferraz",
)

BUSINESSES: Tuple[Business, ...] = (
    Business(
        id="casino", name="Cassino Eclipse",
        income=Resources(cash=120, respect=3), heat=4,
    ),
    Business(
        id="laundering", name="Lavagem de Dinheiro",
        income=Resources(cash=80, influence=2), heat=2,
    ),
    Business(
        id="intel", name="Tráfico de Informação",
        income=Resources(cash=60, influence=3, respect=1), heat=3,
    ),
)

TROOPS: Tuple[Troop, ...] = (
    Troop(
        id="capangas", name="Capangas", type="Básico",
        description="Carne para canhão e ocupação de território.",
        attack=8, defense=5, upkeep=5,
    ),
    Troop(
        id="segurancas", name="Seguranças", type="Especialista",
        description="Protegem negócios e resistem a raids.",
        attack=6, defense=10, upkeep=8,
    ),
    Troop(
        id="hackers", name="Hackers", type="Especialista",
        description="Infiltram sistemas e aumentam influência.",
        attack=7, defense=6, upkeep=9,
    ),
    Troop(
        id="batedores", name="Batedores", type="Especialista",
        description="Reconhecimento e bônus de ataque em raids.",
        attack=9, defense=4, upkeep=6,
    ),
)

TERRITORIES: Tuple[Territory, ...] = (
    Territory(id="north", name="Distrito Ártico", defense=22,
              business_ids=("casino", "intel")),
    Territory(id="central", name="Cinturão Central", defense=18,
              business_ids=("laundering",)),
    Territory(id="docks", name="Docas Prismáticas", defense=26,
              business_ids=("intel", "laundering")),
    Territory(id="uptown", name="Zona Alta", defense=30,
              business_ids=("casino",)),
)

INTRO_LOG: Tuple[str, ...] = (
    "O império nasceu na madrugada chuvosa da Cidade Neon.",
    "Capangas patrulham o Distrito Ártico em busca de rivais.",
)

DEFAULT_RAID_TROOP_ID = "capangas"
DEFAULT_RAID_TERRITORY_ID = "central"


def _find(items: Sequence, item_id: str):
    for item in items:
        if item.id == item_id:
            return item
    return None


def get_business(business_id: str) -> Optional[Business]:
    return _find(BUSINESSES, business_id)


def get_troop(troop_id: str) -> Optional[Troop]:
    return _find(TROOPS, troop_id)


def get_territory(territory_id: str) -> Optional[Territory]:
    return _find(TERRITORIES, territory_id)
