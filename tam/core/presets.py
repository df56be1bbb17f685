"""Built-in segment sets, population bases and the segment color palette."""

from typing import List

from pydantic import BaseModel

from tam.core.models import Segment, SegmentSet

DEFAULT_POPULATION = 8_100_000_000
DEFAULT_DOT_COUNT = 2500
NOT_IN_MARKET_COLOR = "#6b7280"

SEGMENT_COLORS = [
    "#6b7280",
    "#22c55e",
    "#f59e0b",
    "#ef4444",
    "#3b82f6",
    "#a855f7",
    "#ec4899",
    "#14b8a6",
    "#f97316",
    "#8b5cf6",
]


class TAMData(BaseModel):
    """A titled segment set with the dot count used to draw it."""
    title: str
    dot_count: int
    segment_set: SegmentSet


class PopulationPreset(BaseModel):
    label: str
    value: int


class PresetPopulation(BaseModel):
    id: str
    name: str
    segment_set: SegmentSet


WORLD_AI_USAGE = SegmentSet(
    total_population=DEFAULT_POPULATION,
    segments=[
        Segment(id="never-used", name="Never used AI", count=6_800_000_000, color="#6b7280"),
        Segment(id="free-chatbot", name="Free chatbot user", count=1_300_000_000, color="#22c55e"),
        Segment(id="pays-20", name="Pays $20/mo for AI", count=20_000_000, color="#f59e0b"),
        Segment(id="coding-scaffold", name="Uses coding scaffold", count=3_500_000, color="#ef4444"),
    ],
)

DEFAULT_TAM_DATA = TAMData(
    title="World Population by AI Usage",
    dot_count=DEFAULT_DOT_COUNT,
    segment_set=WORLD_AI_USAGE,
)

POPULATION_PRESETS: List[PopulationPreset] = [
    PopulationPreset(label="World", value=8_100_000_000),
    PopulationPreset(label="US", value=335_000_000),
    PopulationPreset(label="EU", value=450_000_000),
    PopulationPreset(label="China", value=1_400_000_000),
    PopulationPreset(label="India", value=1_400_000_000),
    PopulationPreset(label="Brazil", value=215_000_000),
    PopulationPreset(label="UK", value=67_000_000),
]

PRESET_POPULATIONS: List[PresetPopulation] = [
    PresetPopulation(
        id="preset-world-ai",
        name="World Population - AI Usage",
        segment_set=WORLD_AI_USAGE,
    ),
    PresetPopulation(
        id="preset-us-saas",
        name="US SaaS Market",
        segment_set=SegmentSet(
            total_population=335_000_000,
            segments=[
                Segment(id="no-saas", name="No SaaS usage", count=200_000_000, color="#6b7280"),
                Segment(id="free-tier", name="Free tier users", count=80_000_000, color="#22c55e"),
                Segment(id="smb-paid", name="SMB paid ($50-200/mo)", count=40_000_000, color="#3b82f6"),
                Segment(id="enterprise", name="Enterprise ($1K+/mo)", count=15_000_000, color="#f59e0b"),
            ],
        ),
    ),
    PresetPopulation(
        id="preset-global-ecommerce",
        name="Global E-commerce",
        segment_set=SegmentSet(
            total_population=8_100_000_000,
            segments=[
                Segment(id="no-internet", name="No internet access", count=2_600_000_000, color="#6b7280"),
                Segment(id="online-no-buy", name="Online, never buys", count=2_500_000_000, color="#9ca3af"),
                Segment(id="occasional", name="Occasional buyer", count=2_000_000_000, color="#22c55e"),
                Segment(id="frequent", name="Frequent buyer (1x/week+)", count=800_000_000, color="#3b82f6"),
                Segment(id="power-shopper", name="Power shopper ($500+/mo)", count=200_000_000, color="#f59e0b"),
            ],
        ),
    ),
]


def get_preset(preset_id: str) -> PresetPopulation:
    """Return a copy of a preset that is safe to edit."""
    for preset in PRESET_POPULATIONS:
        if preset.id == preset_id:
            return preset.model_copy(deep=True)
    raise ValueError(f"Preset {preset_id} not found")
