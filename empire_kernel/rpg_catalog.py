"""
Empire Kernel — RPG Variant Catalog

Rank progression, crimes, black-market items, the recruit pool and the
world map. Ranks are listed in ascending order; list position is the
total order used for eligibility and promotion.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from .domain_types import (
    BlackMarketItem, Crime, DominantOrg, Neighborhood, Rank,
    RecruitCandidate, Region, Resources, WorldMap, join_key,
)


# ── Ranks ─────────────────────────────────────────────────────

RANK_RECRUIT = "Recruta"
RANK_SOLDIER = "Soldado"
RANK_GENERAL = "General"
RANK_ELITE = "Elite"

RANKS: Tuple[Rank, ...] = (
    Rank(RANK_RECRUIT, min_xp=0, promote_cost=Resources(), power=1),
    Rank(RANK_SOLDIER, min_xp=100,
         promote_cost=Resources(cash=300, respect=5), power=3),
    Rank(RANK_GENERAL, min_xp=250,
         promote_cost=Resources(cash=1200, respect=15), power=7),
    Rank(RANK_ELITE, min_xp=400,
         promote_cost=Resources(cash=3000, respect=30), power=12),
)

RANK_NAMES: Tuple[str, ...] = tuple(r.name for r in RANKS)


# ── Black market ──────────────────────────────────────────────

ITEMS: Tuple[BlackMarketItem, ...] = (
    BlackMarketItem(id="arma-fogo", name="Arma de Fogo", price=120),
    BlackMarketItem(id="celular-descartavel", name="Celular Descartável",
                    price=60),
    BlackMarketItem(id="colete", name="Colete à Prova de Balas", price=250,
                    effects=Resources(respect=1)),
    BlackMarketItem(id="carro-blindado", name="Carro Blindado", price=900,
                    effects=Resources(respect=3)),
    BlackMarketItem(id="propina", name="Propina para a Polícia", price=400,
                    effects=Resources(influence=5)),
)


# ── Crimes ────────────────────────────────────────────────────

CRIMES: Tuple[Crime, ...] = (
    Crime(
        id="furto", name="Furto de Celulares", tier=1,
        rewards=Resources(cash=60, respect=1), xp=15, risk=0.1,
    ),
    Crime(
        id="assalto", name="Assalto a Mão Armada", tier=2,
        rewards=Resources(cash=250, respect=4), xp=40, risk=0.3,
        required_item_ids=("arma-fogo",),
    ),
    Crime(
        id="sequestro", name="Sequestro Relâmpago", tier=3,
        rewards=Resources(cash=900, respect=10), xp=90, risk=0.45,
        required_item_ids=("arma-fogo", "celular-descartavel"),
        min_rank_counts=((RANK_SOLDIER, 2),),
    ),
    Crime(
        id="roubo-banco", name="Roubo ao Banco Central", tier=4,
        rewards=Resources(cash=3000, respect=25), xp=200, risk=0.6,
        required_item_ids=("arma-fogo", "colete", "carro-blindado"),
        min_rank_counts=((RANK_GENERAL, 1), (RANK_SOLDIER, 3)),
    ),
)


# ── Recruit pool ──────────────────────────────────────────────

RECRUIT_POOL: Tuple[RecruitCandidate, ...] = (
    RecruitCandidate(id="r-tiao", name="Tião Navalha", rank=RANK_RECRUIT,
                     xp=20, level=1, entry_type="cash", entry_value=200),
    RecruitCandidate(id="r-dona-ines", name="Dona Inês", rank=RANK_RECRUIT,
                     xp=45, level=1, entry_type="respect", entry_value=5),
    RecruitCandidate(id="r-marreta", name="Marreta", rank=RANK_SOLDIER,
                     xp=120, level=3, entry_type="cash", entry_value=650),
    RecruitCandidate(id="r-coronel", name="Coronel Braga", rank=RANK_GENERAL,
                     xp=300, level=7, entry_type="respect", entry_value=25),
)

PLAYER_ID = "player"
PLAYER_NAME = "Você"

INTRO_LOG: Tuple[str, ...] = (
    "Você chegou à cidade com $2500 e muita ambição.",
)


# ── World map ─────────────────────────────────────────────────
# country -> state -> city -> [(neighborhood id, name, org, power, elites)]

WORLD: Tuple = (
    ("br", "Brasil", (
        ("sp", "São Paulo", (
            ("sao-paulo", "São Paulo", (
                ("se", "Sé", "Irmandade da Sé", 6, 1),
                ("bras", "Brás", "Comando do Brás", 10, 1),
                ("capao", "Capão Redondo", "Família Capão", 18, 2),
            )),
            ("santos", "Santos", (
                ("porto", "Porto de Santos", "Sindicato do Cais", 24, 3),
            )),
        )),
        ("rj", "Rio de Janeiro", (
            ("rio", "Rio de Janeiro", (
                ("copacabana", "Copacabana", "Bonde da Orla", 12, 1),
                ("mare", "Maré", "Frente da Maré", 30, 3),
            )),
        )),
    )),
    ("ar", "Argentina", (
        ("ba", "Buenos Aires", (
            ("caba", "Ciudad de Buenos Aires", (
                ("la-boca", "La Boca", "Los Xeneizes", 14, 2),
                ("palermo", "Palermo", "Clan Palermo", 20, 2),
            )),
        )),
    )),
)


def build_world_map() -> WorldMap:
    """Build a fresh world map with every presence ``Inexistente``."""
    world = WorldMap()
    for country_id, country_name, states in WORLD:
        state_keys = []
        for state_id, state_name, cities in states:
            state_key = join_key(country_id, state_id)
            city_keys = []
            for city_id, city_name, hoods in cities:
                city_key = join_key(state_key, city_id)
                hood_keys = []
                for hood_id, hood_name, org_name, power, elites in hoods:
                    hood_key = join_key(city_key, hood_id)
                    world.neighborhoods[hood_key] = Neighborhood(
                        id=hood_id,
                        name=hood_name,
                        dominant_org=DominantOrg(
                            name=org_name, power_level=power,
                            elite_count=elites,
                        ),
                    )
                    hood_keys.append(hood_key)
                world.regions[city_key] = Region(
                    id=city_id, name=city_name, level="city",
                    children=tuple(hood_keys),
                )
                city_keys.append(city_key)
            world.regions[state_key] = Region(
                id=state_id, name=state_name, level="state",
                children=tuple(city_keys),
            )
            state_keys.append(state_key)
        world.regions[country_id] = Region(
            id=country_id, name=country_name, level="country",
            children=tuple(state_keys),
        )
        world.country_ids.append(country_id)
    return world


# ── Lookups ───────────────────────────────────────────────────

_RANKS_BY_NAME: Dict[str, Rank] = {r.name: r for r in RANKS}


def get_rank(name: str) -> Optional[Rank]:
    return _RANKS_BY_NAME.get(name)


def get_rank_index(name: str) -> int:
    """Position of *name* in the rank order; -1 when unknown."""
    try:
        return RANK_NAMES.index(name)
    except ValueError:
        return -1


def get_next_rank(name: str) -> Optional[str]:
    """Name of the rank after *name*, or None at the top (or unknown)."""
    idx = get_rank_index(name)
    if idx < 0 or idx + 1 >= len(RANK_NAMES):
        return None
    return RANK_NAMES[idx + 1]


def rank_power(name: str) -> int:
    """Combat weight of a rank; unknown ranks weigh nothing."""
    rank = _RANKS_BY_NAME.get(name)
    return rank.power if rank else 0


_CRIMES_BY_ID: Dict[str, Crime] = {c.id: c for c in CRIMES}
_ITEMS_BY_ID: Dict[str, BlackMarketItem] = {i.id: i for i in ITEMS}


def get_crime(crime_id: str) -> Optional[Crime]:
    return _CRIMES_BY_ID.get(crime_id)


def get_item(item_id: str) -> Optional[BlackMarketItem]:
    return _ITEMS_BY_ID.get(item_id)
