"""OPIc proficiency level models."""

from enum import StrEnum

from pydantic import BaseModel


class LevelBand(StrEnum):
    """Groups of levels, each governed by its own rule tier."""

    NOVICE = "novice"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Level(StrEnum):
    """OPIc speaking levels, declared from lowest to highest."""

    NL = "NL"
    NM = "NM"
    NH = "NH"
    IL = "IL"
    IM1 = "IM1"
    IM2 = "IM2"
    IM3 = "IM3"
    IH = "IH"
    AL = "AL"

    @property
    def rank(self) -> int:
        """Ordinal position, 0 for NL up to 8 for AL."""
        return _RANKS[self]

    @property
    def band(self) -> LevelBand:
        if self.rank <= Level.NH.rank:
            return LevelBand.NOVICE
        if self.rank <= Level.IM3.rank:
            return LevelBand.INTERMEDIATE
        return LevelBand.ADVANCED

    def outranks(self, other: "Level") -> bool:
        return self.rank > other.rank

    @classmethod
    def lowest(cls) -> "Level":
        return cls.NL

    @classmethod
    def from_rank(cls, rank: int) -> "Level":
        members = list(cls)
        if not 0 <= rank < len(members):
            raise ValueError(f"Level rank out of range: {rank}")
        return members[rank]

    @classmethod
    def parse(cls, value: object) -> "Level | None":
        """Parse a stored or user-supplied level id; None if unknown or not a string."""
        if not isinstance(value, str) or not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


_RANKS: dict[Level, int] = {level: i for i, level in enumerate(Level)}

INTERMEDIATE_BANDS: frozenset[Level] = frozenset({Level.IL, Level.IM1, Level.IM2, Level.IM3})


class LevelOption(BaseModel):
    """Selectable target level shown to the learner."""

    id: Level
    title: str
    description: str


LEVEL_OPTIONS: list[LevelOption] = [
    LevelOption(id=Level.NL, title="Novice Low", description="Isolated words, no sentences yet."),
    LevelOption(id=Level.NM, title="Novice Mid", description="Memorized phrases and short lists."),
    LevelOption(id=Level.NH, title="Novice High", description="Short, predictable sentences on familiar topics."),
    LevelOption(id=Level.IL, title="Intermediate Low", description="Simple sentences with weak linking."),
    LevelOption(id=Level.IM1, title="Intermediate Mid 1", description="Short paragraphs introducing a topic."),
    LevelOption(id=Level.IM2, title="Intermediate Mid 2", description="Linked sentences with some time shifts."),
    LevelOption(id=Level.IM3, title="Intermediate Mid 3", description="Stable paragraphs with connectors and tense variety."),
    LevelOption(id=Level.IH, title="Intermediate High", description="Connected multi-sentence discourse on the topic."),
    LevelOption(id=Level.AL, title="Advanced Low", description="Extended narration across time frames with good control."),
]
