"""Twenty-four solar terms (nijushi sekki) and seventy-two micro-seasons (shichijuni ko)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .astro import normalize_degrees

__all__ = [
    "SolarTerm",
    "MicroSeason",
    "SOLAR_TERMS",
    "MICRO_SEASONS",
    "TERM_WIDTH",
    "MICRO_SEASON_WIDTH",
    "MICRO_SEASON_ORIGIN",
    "solar_term_for",
    "micro_season_for",
]

TERM_WIDTH = 15.0
MICRO_SEASON_WIDTH = 5.0
MICRO_SEASON_ORIGIN = 315.0  # risshun


@dataclass(frozen=True)
class SolarTerm:
    index: int
    name: str
    reading: str
    english: str
    longitude: float

    @property
    def end_longitude(self) -> float:
        return normalize_degrees(self.longitude + TERM_WIDTH)

    def contains(self, longitude: float) -> bool:
        """True when *longitude* lies in ``[longitude, longitude + 15)``, across 360°."""

        value = normalize_degrees(longitude)
        end = self.longitude + TERM_WIDTH
        if value < self.longitude:
            value += 360.0
        return self.longitude <= value < end


@dataclass(frozen=True)
class MicroSeason:
    index: int
    name: str
    reading: str
    longitude: float
    term: SolarTerm

    def contains(self, longitude: float) -> bool:
        value = normalize_degrees(longitude)
        if value < self.longitude:
            value += 360.0
        return self.longitude <= value < self.longitude + MICRO_SEASON_WIDTH


_TERM_ROWS: Tuple[Tuple[str, str, str], ...] = (
    ("春分", "しゅんぶん", "spring equinox"),
    ("清明", "せいめい", "clear and bright"),
    ("穀雨", "こくう", "grain rain"),
    ("立夏", "りっか", "start of summer"),
    ("小満", "しょうまん", "grain buds"),
    ("芒種", "ぼうしゅ", "grain in ear"),
    ("夏至", "げし", "summer solstice"),
    ("小暑", "しょうしょ", "minor heat"),
    ("大暑", "たいしょ", "major heat"),
    ("立秋", "りっしゅう", "start of autumn"),
    ("処暑", "しょしょ", "end of heat"),
    ("白露", "はくろ", "white dew"),
    ("秋分", "しゅうぶん", "autumn equinox"),
    ("寒露", "かんろ", "cold dew"),
    ("霜降", "そうこう", "frost descent"),
    ("立冬", "りっとう", "start of winter"),
    ("小雪", "しょうせつ", "minor snow"),
    ("大雪", "たいせつ", "major snow"),
    ("冬至", "とうじ", "winter solstice"),
    ("小寒", "しょうかん", "minor cold"),
    ("大寒", "だいかん", "major cold"),
    ("立春", "りっしゅん", "start of spring"),
    ("雨水", "うすい", "rain water"),
    ("啓蟄", "けいちつ", "awakening of insects"),
)

# Index 0 of SOLAR_TERMS is the vernal equinox at 0°.
SOLAR_TERMS: Tuple[SolarTerm, ...] = tuple(
    SolarTerm(index=i, name=name, reading=reading, english=english, longitude=i * TERM_WIDTH)
    for i, (name, reading, english) in enumerate(_TERM_ROWS)
)

# Three ko per term, listed from risshun (315°).
_MICRO_SEASON_ROWS: Tuple[Tuple[str, str], ...] = (
    ("東風解凍", "はるかぜこおりをとく"),
    ("黄鶯睍睆", "うぐいすなく"),
    ("魚上氷", "うおこおりをいずる"),
    ("土脉潤起", "つちのしょううるおいおこる"),
    ("霞始靆", "かすみはじめてたなびく"),
    ("草木萌動", "そうもくめばえいずる"),
    ("蟄虫啓戸", "すごもりむしとをひらく"),
    ("桃始笑", "ももはじめてさく"),
    ("菜虫化蝶", "なむしちょうとなる"),
    ("雀始巣", "すずめはじめてすくう"),
    ("櫻始開", "さくらはじめてひらく"),
    ("雷乃発声", "かみなりすなわちこえをはっす"),
    ("玄鳥至", "つばめきたる"),
    ("鴻雁北", "こうがんかえる"),
    ("虹始見", "にじはじめてあらわる"),
    ("葭始生", "あしはじめてしょうず"),
    ("霜止出苗", "しもやんでなえいずる"),
    ("牡丹華", "ぼたんはなさく"),
    ("蛙始鳴", "かわずはじめてなく"),
    ("蚯蚓出", "みみずいずる"),
    ("竹笋生", "たけのこしょうず"),
    ("蚕起食桑", "かいこおきてくわをはむ"),
    ("紅花栄", "べにばなさかう"),
    ("麦秋至", "むぎのときいたる"),
    ("蟷螂生", "かまきりしょうず"),
    ("腐草為螢", "くされたるくさほたるとなる"),
    ("梅子黄", "うめのみきばむ"),
    ("乃東枯", "なつかれくさかるる"),
    ("菖蒲華", "あやめはなさく"),
    ("半夏生", "はんげしょうず"),
    ("温風至", "あつかぜいたる"),
    ("蓮始開", "はすはじめてひらく"),
    ("鷹乃学習", "たかすなわちわざをならう"),
    ("桐始結花", "きりはじめてはなをむすぶ"),
    ("土潤溽暑", "つちうるおうてむしあつし"),
    ("大雨時行", "たいうときどきふる"),
    ("涼風至", "すずかぜいたる"),
    ("寒蝉鳴", "ひぐらしなく"),
    ("蒙霧升降", "ふかききりまとう"),
    ("綿柎開", "わたのはなしべひらく"),
    ("天地始粛", "てんちはじめてさむし"),
    ("禾乃登", "こくものすなわちみのる"),
    ("草露白", "くさのつゆしろし"),
    ("鶺鴒鳴", "せきれいなく"),
    ("玄鳥去", "つばめさる"),
    ("雷乃収声", "かみなりすなわちこえをおさむ"),
    ("蟄虫坏戸", "むしかくれてとをふさぐ"),
    ("水始涸", "みずはじめてかるる"),
    ("鴻雁来", "こうがんきたる"),
    ("菊花開", "きくのはなひらく"),
    ("蟋蟀在戸", "きりぎりすとにあり"),
    ("霜始降", "しもはじめてふる"),
    ("霎時施", "こさめときどきふる"),
    ("楓蔦黄", "もみじつたきばむ"),
    ("山茶始開", "つばきはじめてひらく"),
    ("地始凍", "ちはじめてこおる"),
    ("金盞香", "きんせんかさく"),
    ("虹蔵不見", "にじかくれてみえず"),
    ("朔風払葉", "きたかぜこのはをはらう"),
    ("橘始黄", "たちばなはじめてきばむ"),
    ("閉塞成冬", "そらさむくふゆとなる"),
    ("熊蟄穴", "くまあなにこもる"),
    ("鱖魚群", "さけのうおむらがる"),
    ("乃東生", "なつかれくさしょうず"),
    ("麋角解", "さわしかのつのおつる"),
    ("雪下出麦", "ゆきわたりてむぎのびる"),
    ("芹乃栄", "せりすなわちさかう"),
    ("水泉動", "しみずあたたかをふくむ"),
    ("雉始雊", "きじはじめてなく"),
    ("款冬華", "ふきのはなさく"),
    ("水沢腹堅", "さわみずこおりつめる"),
    ("鶏始乳", "にわとりはじめてとやにつく"),
)


def _owning_term(micro_index: int) -> SolarTerm:
    start = normalize_degrees(MICRO_SEASON_ORIGIN + (micro_index // 3) * TERM_WIDTH)
    return SOLAR_TERMS[int(start // TERM_WIDTH)]


MICRO_SEASONS: Tuple[MicroSeason, ...] = tuple(
    MicroSeason(
        index=i,
        name=name,
        reading=reading,
        longitude=normalize_degrees(MICRO_SEASON_ORIGIN + i * MICRO_SEASON_WIDTH),
        term=_owning_term(i),
    )
    for i, (name, reading) in enumerate(_MICRO_SEASON_ROWS)
)


def solar_term_for(longitude: float) -> SolarTerm:
    """Solar term whose 15° band contains *longitude*."""

    value = normalize_degrees(longitude)
    return SOLAR_TERMS[int(value // TERM_WIDTH) % len(SOLAR_TERMS)]


def micro_season_for(longitude: float) -> MicroSeason:
    """Micro-season whose 5° band contains *longitude*.

    Equivalent to ``floor(((longitude - 315) mod 360) / 5) mod 72``, but the
    sub-band is taken relative to the owning term's start so the result always
    nests inside :func:`solar_term_for`.
    """

    value = normalize_degrees(longitude)
    term = solar_term_for(value)
    sub_band = min(int((value - term.longitude) // MICRO_SEASON_WIDTH), 2)
    terms_since_origin = (term.index - int(MICRO_SEASON_ORIGIN // TERM_WIDTH)) % len(SOLAR_TERMS)
    return MICRO_SEASONS[terms_since_origin * 3 + sub_band]
