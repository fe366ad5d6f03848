"""Language, gender and Polly voice tables."""
import random
from enum import Enum
from typing import Dict, List, Optional


class Gender(str, Enum):
    F = "F"
    M = "M"
    N = "N"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Gender":
        try:
            return cls((value or "").strip().upper())
        except ValueError:
            return cls.N


class Lang(str, Enum):
    AR = "ar"
    CA = "ca"
    CS = "cs"
    DA = "da"
    DE = "de"
    EL = "el"
    EN = "en"
    ES = "es"
    FI = "fi"
    FR = "fr"
    GL = "gl"
    GU = "gu"
    HE = "he"
    HI = "hi"
    HU = "hu"
    ID = "id"
    IT = "it"
    KN = "kn"
    KO = "ko"
    LT = "lt"
    LV = "lv"
    MR = "mr"
    MS = "ms"
    NB = "nb"
    NL = "nl"
    PA = "pa"
    PL = "pl"
    PT = "pt"
    RO = "ro"
    RU = "ru"
    SK = "sk"
    SR = "sr"
    SV = "sv"
    TR = "tr"
    UK = "uk"
    VI = "vi"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Lang":
        # "es-MX" -> es; anything unknown -> English
        try:
            return cls((value or "").strip()[:2].lower())
        except ValueError:
            return cls.EN


LANGUAGE_NAMES: Dict[Lang, str] = {
    Lang.AR: "Arabic",
    Lang.CA: "Catalan",
    Lang.CS: "Czech",
    Lang.DA: "Danish",
    Lang.DE: "German",
    Lang.EL: "Greek",
    Lang.EN: "English",
    Lang.ES: "Spanish",
    Lang.FI: "Finnish",
    Lang.FR: "French",
    Lang.GL: "Galician",
    Lang.GU: "Gujarati",
    Lang.HE: "Hebrew",
    Lang.HI: "Hindi",
    Lang.HU: "Hungarian",
    Lang.ID: "Indonesian",
    Lang.IT: "Italian",
    Lang.KN: "Kannada",
    Lang.KO: "Korean",
    Lang.LT: "Lithuanian",
    Lang.LV: "Latvian",
    Lang.MR: "Marathi",
    Lang.MS: "Malay",
    Lang.NB: "Norwegian",
    Lang.NL: "Dutch",
    Lang.PA: "Punjabi",
    Lang.PL: "Polish",
    Lang.PT: "Portuguese",
    Lang.RO: "Romanian",
    Lang.RU: "Russian",
    Lang.SK: "Slovak",
    Lang.SR: "Serbian",
    Lang.SV: "Swedish",
    Lang.TR: "Turkish",
    Lang.UK: "Ukrainian",
    Lang.VI: "Vietnamese",
}


def _only(voice: str) -> Dict[Gender, List[str]]:
    return {Gender.F: [voice], Gender.M: [voice], Gender.N: [voice]}


# Languages Polly only offers one voice for reuse it for every gender
VOICES: Dict[Lang, Dict[Gender, List[str]]] = {
    Lang.AR: _only("Zeina"),
    Lang.HE: _only("Ruth"),
    Lang.SV: _only("Astrid"),
    Lang.TR: _only("Filiz"),
    Lang.EN: {
        Gender.F: ["Joanna", "Kendra", "Kimberly", "Salli", "Ruth", "Ivy", "Amy"],
        Gender.M: ["Matthew", "Justin", "Joey", "Kevin", "Stephen"],
        Gender.N: ["Joanna", "Matthew", "Kendra", "Kimberly", "Salli", "Joey", "Justin", "Kevin"],
    },
    Lang.KO: _only("Seoyeon"),
    Lang.ES: {
        Gender.F: ["Conchita", "Lucia", "Mia", "Lupe"],
        Gender.M: ["Miguel", "Enrique", "Pedro"],
        Gender.N: ["Conchita", "Miguel", "Lucia", "Enrique", "Mia", "Lupe", "Pedro"],
    },
    Lang.IT: {
        Gender.F: ["Carla", "Bianca"],
        Gender.M: ["Giorgio"],
        Gender.N: ["Carla", "Giorgio", "Bianca"],
    },
    Lang.FR: {
        Gender.F: ["Celine", "Lea"],
        Gender.M: ["Mathieu"],
        Gender.N: ["Celine", "Mathieu", "Lea"],
    },
    Lang.CA: _only("Arlet"),
    Lang.CS: _only("Vicki"),
    Lang.DA: {Gender.F: ["Naja"], Gender.M: ["Mads"], Gender.N: ["Naja", "Mads"]},
    Lang.NL: {Gender.F: ["Laura"], Gender.M: ["Ruben"], Gender.N: ["Laura", "Ruben"]},
    Lang.FI: _only("Suvi"),
    Lang.DE: {
        Gender.F: ["Marlene", "Vicki"],
        Gender.M: ["Hans"],
        Gender.N: ["Marlene", "Hans", "Vicki"],
    },
    Lang.HI: _only("Aditi"),
    Lang.ID: _only("Lea"),
    Lang.MS: _only("Nina"),
    Lang.NB: _only("Liv"),
    Lang.PL: {
        Gender.F: ["Ewa", "Maja"],
        Gender.M: ["Jacek", "Jan"],
        Gender.N: ["Ewa", "Jacek", "Jan", "Maja"],
    },
    Lang.PT: {
        Gender.F: ["Camila", "Vitoria", "Ines"],
        Gender.M: ["Ricardo", "Thiago"],
        Gender.N: ["Camila", "Ricardo", "Vitoria", "Thiago", "Ines"],
    },
    Lang.RO: _only("Carmen"),
    Lang.RU: {Gender.F: ["Tatyana"], Gender.M: ["Maxim"], Gender.N: ["Tatyana", "Maxim"]},
    # no Ukrainian voices, borrow the Russian ones
    Lang.UK: {Gender.F: ["Tatyana"], Gender.M: ["Maxim"], Gender.N: ["Tatyana", "Maxim"]},
    Lang.VI: _only("Hiujin"),
}


def voice_candidates(lang, gender) -> List[str]:
    """Every voice that may speak ``lang`` with ``gender``.

    Accepts enum members or raw strings. A language without a table uses
    English; a gender missing from a table uses that table's neutral list.
    """
    table = VOICES.get(Lang.parse(lang)) or VOICES[Lang.EN]
    return table.get(Gender.parse(gender)) or table[Gender.N]


def choose_voice(lang, gender, rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(voice_candidates(lang, gender))
