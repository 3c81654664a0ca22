"""
Static place-name to location-code resolution.

The table maps city names, country names and common aliases (English,
Spanish, accented and Devanagari spellings) to a single 3-letter location
code. Countries resolve to their main international airport.
"""

import re
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import structlog

from ..utils.validators import validate_location_code


logger = structlog.get_logger(__name__)


LOCATION_TABLE: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    # United States
    ("JFK", ("new york", "nueva york", "nyc", "manhattan", "ny", "usa", "united states", "estados unidos", "america")),
    ("LAX", ("los angeles", "la")),
    ("SFO", ("san francisco", "sf")),
    ("ORD", ("chicago",)),
    ("MIA", ("miami",)),
    ("BOS", ("boston",)),
    ("IAD", ("washington", "washington dc", "dc")),
    ("SEA", ("seattle",)),
    ("ATL", ("atlanta",)),
    ("IAH", ("houston",)),
    ("DFW", ("dallas",)),
    ("PHL", ("philadelphia",)),
    ("PHX", ("phoenix",)),
    # United Kingdom
    ("LHR", ("london", "londres", "londom", "londón", "lon", "uk", "united kingdom", "reino unido", "england", "inglaterra")),
    ("MAN", ("manchester",)),
    ("EDI", ("edinburgh",)),
    ("GLA", ("glasgow",)),
    ("BHX", ("birmingham",)),
    # Spain
    ("MAD", ("madrid", "spain", "españa", "espana")),
    ("BCN", ("barcelona",)),
    ("VLC", ("valencia",)),
    ("SVQ", ("sevilla", "seville")),
    ("BIO", ("bilbao",)),
    # France
    ("CDG", ("paris", "parís", "france", "francia")),
    ("LYS", ("lyon",)),
    ("MRS", ("marseille", "marsella")),
    ("NCE", ("nice",)),
    # Germany
    ("BER", ("berlin",)),
    ("MUC", ("munich", "múnich", "münchen")),
    ("FRA", ("frankfurt", "germany", "alemania")),
    ("HAM", ("hamburg",)),
    ("CGN", ("cologne", "colonia", "köln")),
    # Italy
    ("FCO", ("rome", "roma", "italy", "italia")),
    ("MXP", ("milan", "milán", "milano")),
    ("VCE", ("venice", "venecia")),
    ("NAP", ("naples", "napoles", "nápoles")),
    # Benelux, Alps, Iberia
    ("AMS", ("amsterdam", "netherlands", "holland", "holanda", "países bajos")),
    ("BRU", ("brussels", "bruselas", "belgium", "bélgica")),
    ("ZRH", ("zurich", "zúrich", "switzerland", "suiza")),
    ("GVA", ("geneva", "ginebra")),
    ("VIE", ("vienna", "viena", "austria")),
    ("LIS", ("lisbon", "lisboa", "portugal")),
    ("OPO", ("porto",)),
    # Eastern Mediterranean
    ("ATH", ("athens", "atenas", "greece", "grecia")),
    ("IST", ("istanbul", "turkey", "turquía", "turkiye")),
    ("ESB", ("ankara",)),
    ("TLV", ("tel aviv", "israel")),
    # Russia
    ("SVO", ("moscow", "moscú", "moscu", "russia", "rusia")),
    ("LED", ("saint petersburg", "st petersburg", "san petersburgo")),
    # Central and Northern Europe
    ("WAW", ("warsaw", "varsovia", "poland", "polonia")),
    ("PRG", ("prague", "praga", "czech republic", "república checa")),
    ("BUD", ("budapest", "hungary", "hungría")),
    ("OTP", ("bucharest", "bucarest", "romania", "rumania")),
    ("ARN", ("stockholm", "sweden", "suecia")),
    ("OSL", ("oslo", "norway", "noruega")),
    ("CPH", ("copenhagen", "copenhague", "denmark", "dinamarca")),
    ("HEL", ("helsinki", "finland", "finlandia")),
    ("DUB", ("dublin", "ireland", "irlanda")),
    # China and East Asia
    ("PEK", ("beijing", "pekin", "pequín", "china")),
    ("PVG", ("shanghai",)),
    ("CAN", ("guangzhou",)),
    ("SZX", ("shenzhen",)),
    ("HKG", ("hong kong",)),
    ("NRT", ("tokyo", "tokio", "japan", "japón")),
    ("KIX", ("osaka",)),
    ("ICN", ("seoul", "seúl", "south korea", "corea del sur", "korea")),
    ("PUS", ("busan",)),
    # India
    ("DEL", ("delhi", "new delhi", "nueva delhi", "india", "दिल्ली", "नई दिल्ली", "भारत")),
    ("BOM", ("mumbai", "bombay", "मुंबई")),
    ("BLR", ("bangalore", "bengaluru", "बेंगलुरु")),
    ("MAA", ("chennai", "madras", "चेन्नई")),
    ("CCU", ("kolkata", "calcutta", "calcuta", "कोलकाता")),
    ("HYD", ("hyderabad", "हैदराबाद")),
    ("PNQ", ("pune", "पुणे")),
    ("GOI", ("goa", "गोवा")),
    ("COK", ("kochi", "cochin")),
    ("JAI", ("jaipur", "जयपुर")),
    ("AMD", ("ahmedabad", "अहमदाबाद")),
    # South-East Asia and Oceania
    ("BKK", ("bangkok", "thailand", "tailandia")),
    ("HKT", ("phuket",)),
    ("SIN", ("singapore", "singapur")),
    ("KUL", ("kuala lumpur", "malaysia", "malasia")),
    ("CGK", ("jakarta", "indonesia")),
    ("DPS", ("bali",)),
    ("MNL", ("manila", "philippines", "filipinas")),
    ("SGN", ("ho chi minh", "ho chi minh city", "saigon", "vietnam")),
    ("HAN", ("hanoi",)),
    ("SYD", ("sydney", "australia")),
    ("MEL", ("melbourne",)),
    ("BNE", ("brisbane",)),
    ("PER", ("perth",)),
    ("AKL", ("auckland", "new zealand", "nueva zelanda")),
    ("WLG", ("wellington",)),
    # Middle East and Africa
    ("DXB", ("dubai", "uae", "emirates", "emiratos arabes unidos", "दुबई")),
    ("AUH", ("abu dhabi",)),
    ("RUH", ("riyadh", "saudi arabia", "arabia saudí", "arabia saudita")),
    ("JED", ("jeddah",)),
    ("DOH", ("doha", "qatar")),
    ("CAI", ("cairo", "el cairo", "egypt", "egipto")),
    ("CMN", ("casablanca", "morocco", "marruecos")),
    ("NBO", ("nairobi", "kenya", "kenia")),
    ("LOS", ("lagos", "nigeria")),
    ("ABV", ("abuja",)),
    ("JNB", ("johannesburg", "south africa", "sudáfrica", "sudafrica")),
    ("CPT", ("cape town", "ciudad del cabo")),
    # Americas
    ("GRU", ("sao paulo", "são paulo", "brazil", "brasil")),
    ("GIG", ("rio de janeiro", "rio")),
    ("BSB", ("brasilia", "brasília")),
    ("EZE", ("buenos aires", "argentina")),
    ("MEX", ("mexico city", "ciudad de mexico", "mexico", "méxico")),
    ("CUN", ("cancun", "cancún")),
    ("GDL", ("guadalajara",)),
    ("YYZ", ("toronto", "canada", "canadá")),
    ("YVR", ("vancouver",)),
    ("YUL", ("montreal", "montréal")),
    ("YYC", ("calgary",)),
    ("SCL", ("santiago", "chile")),
    ("BOG", ("bogota", "bogotá", "colombia")),
    ("MDE", ("medellin", "medellín")),
    ("LIM", ("lima", "peru", "perú")),
    ("PTY", ("panama", "panama city", "panamá")),
    ("SDQ", ("santo domingo", "dominican republic", "república dominicana")),
    ("HAV", ("havana", "la habana", "cuba")),
)


def _normalize(name: str) -> str:
    return re.sub(r'\s+', ' ', name.strip().lower())


def build_alias_index(
    table: Tuple[Tuple[str, Tuple[str, ...]], ...]
) -> Tuple[Mapping[str, str], List[Tuple[str, str, str]]]:
    """
    Flatten the location table into an alias -> code mapping.

    An alias listed under two different codes is a collision; the first
    entry wins and the collision is returned as (alias, kept, ignored).
    """
    index: Dict[str, str] = {}
    collisions: List[Tuple[str, str, str]] = []

    for code, aliases in table:
        for alias in aliases:
            key = _normalize(alias)
            existing = index.get(key)
            if existing is None:
                index[key] = code
            elif existing != code:
                collisions.append((key, existing, code))

    for alias, kept, ignored in collisions:
        logger.warning("Location alias collision", alias=alias, kept=kept, ignored=ignored)

    return MappingProxyType(index), collisions


CITY_TO_CODE, _COLLISIONS = build_alias_index(LOCATION_TABLE)


def alias_collisions() -> List[Tuple[str, str, str]]:
    """Aliases mapped to more than one code in the location table"""
    return list(_COLLISIONS)


def resolve_location(name: Optional[str]) -> Optional[str]:
    """
    Resolve a place name to its location code.

    A value that is already a location code is returned unchanged.
    """
    if not name:
        return None

    stripped = name.strip()
    if validate_location_code(stripped):
        return stripped

    return CITY_TO_CODE.get(_normalize(stripped))
