"""Canonical food item models shared by both food databases."""

from dataclasses import dataclass, field
from enum import Enum

from meal_planner.domain.errors import ErrorKind, InvalidInputError

_UNKNOWN_MARKERS = {"", "unknown", "not-applicable", "not-applicable-category"}


class FoodSource(Enum):
    """Database a canonical item originates from."""

    OPENFOODFACTS = "openfoodfacts"
    USDA = "usda"
    USER = "user"

    @property
    def id_prefix(self) -> str:
        """Prefix every item id from this source must carry."""
        return _ID_PREFIXES[self]


_ID_PREFIXES = {
    FoodSource.OPENFOODFACTS: "off-",
    FoodSource.USDA: "usda-",
    FoodSource.USER: "user-",
}


class FoodType(Enum):
    """High level classification used by the two search tabs."""

    INGREDIENT = "ingredient"
    FOOD_DRINK = "food-drink"


class NutriScore(Enum):
    """Nutri-Score grade, A (best) to E (worst)."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"

    @classmethod
    def parse(cls, raw: object) -> "NutriScore | None":
        """Parse a provider grade; unknown markers map to None.

        Any other unmapped value raises ``ValueError``.
        """
        if raw is None:
            return None
        text = str(raw).strip().lower()
        if text in _UNKNOWN_MARKERS:
            return None
        return cls(text.upper())

    @property
    def color(self) -> str:
        """Display color conventionally used for the grade."""
        return _NUTRI_SCORE_COLORS[self]


_NUTRI_SCORE_COLORS = {
    NutriScore.A: "#038141",
    NutriScore.B: "#85BB2F",
    NutriScore.C: "#FECB02",
    NutriScore.D: "#EE8100",
    NutriScore.E: "#E63E11",
}


class NovaGroup(Enum):
    """NOVA food processing group."""

    UNPROCESSED = 1
    PROCESSED_INGREDIENTS = 2
    PROCESSED = 3
    ULTRA_PROCESSED = 4

    @classmethod
    def parse(cls, raw: object) -> "NovaGroup | None":
        """Parse a provider NOVA value; ``ValueError`` when out of range."""
        if raw is None:
            return None
        if isinstance(raw, str):
            if raw.strip().lower() in _UNKNOWN_MARKERS:
                return None
            raw = float(raw)
        if isinstance(raw, bool) or not isinstance(raw, int | float):
            raise ValueError(f"Unsupported NOVA group: {raw!r}")
        if raw != int(raw):
            raise ValueError(f"Unsupported NOVA group: {raw!r}")
        return cls(int(raw))

    @property
    def description(self) -> str:
        """Human readable processing description."""
        return _NOVA_DESCRIPTIONS[self]


_NOVA_DESCRIPTIONS = {
    NovaGroup.UNPROCESSED: "Minimally processed",
    NovaGroup.PROCESSED_INGREDIENTS: "Processed ingredients",
    NovaGroup.PROCESSED: "Processed foods",
    NovaGroup.ULTRA_PROCESSED: "Ultra-processed",
}


class NutrientLevel(Enum):
    """Traffic-light level for fat, sugar and salt."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: object) -> "NutrientLevel | None":
        """Parse a provider nutrient level string."""
        if raw is None:
            return None
        text = str(raw).strip().lower()
        if text in _UNKNOWN_MARKERS:
            return None
        return cls(text)


@dataclass(frozen=True)
class NutritionProfile:
    """Nutrition values per 100 g.

    Optional nutrients are ``None`` when the source has no data; ``0`` is a
    measured value.
    """

    calories: float
    protein: float
    carbohydrates: float
    fat: float
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None
    calcium: float | None = None
    iron: float | None = None
    vitamin_c: float | None = None
    vitamin_a: float | None = None
    potassium: float | None = None
    magnesium: float | None = None

    def __post_init__(self) -> None:
        for name in ("calories", "protein", "carbohydrates", "fat"):
            value = getattr(self, name)
            if value is None or value < 0:
                raise InvalidInputError(f"{name} must be a non-negative number")


@dataclass(frozen=True)
class ServingSize:
    """Serving size suggestion for display."""

    amount: float
    unit: str
    description: str


DEFAULT_SERVING_SIZES = (ServingSize(amount=100, unit="g", description="100 grams"),)


@dataclass(frozen=True)
class Portion:
    """USDA household portion."""

    amount: float
    unit: str
    modifier: str | None = None
    gram_weight: float | None = None


@dataclass(frozen=True)
class NutrientLevels:
    """Nutrient traffic-light levels reported by OpenFoodFacts."""

    fat: NutrientLevel | None = None
    sugar: NutrientLevel | None = None
    salt: NutrientLevel | None = None


@dataclass(frozen=True)
class BrandedMetadata:
    """OpenFoodFacts specific metadata."""

    barcode: str
    nutri_score: NutriScore | None = None
    nova_group: NovaGroup | None = None
    nutrient_levels: NutrientLevels | None = None
    dietary_tags: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    countries: tuple[str, ...] = ()
    last_modified: int | None = None

    source = FoodSource.OPENFOODFACTS


@dataclass(frozen=True)
class IngredientMetadata:
    """USDA FoodData Central specific metadata."""

    fdc_id: int
    data_type: str | None = None
    category: str | None = None
    publication_date: str | None = None
    portions: tuple[Portion, ...] = ()

    source = FoodSource.USDA


ProviderMetadata = BrandedMetadata | IngredientMetadata


@dataclass(frozen=True)
class CanonicalFoodItem:
    """Provider-agnostic food or ingredient."""

    id: str
    name: str
    source: FoodSource
    type: FoodType
    nutrition: NutritionProfile
    provider_data: ProviderMetadata | None = None
    image_url: str | None = None
    description: str | None = None
    serving_sizes: tuple[ServingSize, ...] = DEFAULT_SERVING_SIZES

    def __post_init__(self) -> None:
        if not self.id.startswith(self.source.id_prefix):
            raise InvalidInputError(
                f"Item id {self.id!r} does not match source {self.source.value}"
            )
        if self.provider_data is None:
            if self.source is not FoodSource.USER:
                raise InvalidInputError(
                    f"{self.source.value} items require provider metadata"
                )
        elif self.provider_data.source is not self.source:
            raise InvalidInputError(
                f"Metadata for {self.provider_data.source.value} "
                f"attached to a {self.source.value} item"
            )

    @property
    def branded(self) -> BrandedMetadata | None:
        """OpenFoodFacts metadata, when this is a branded item."""
        if isinstance(self.provider_data, BrandedMetadata):
            return self.provider_data
        return None

    @property
    def ingredient(self) -> IngredientMetadata | None:
        """USDA metadata, when this is a raw ingredient."""
        if isinstance(self.provider_data, IngredientMetadata):
            return self.provider_data
        return None


class SortKey(Enum):
    """Sort order applied by advanced search."""

    RELEVANCE = "relevance"
    NAME = "name"
    CALORIES = "calories"
    PROTEIN = "protein"


@dataclass(frozen=True)
class NutritionFilters:
    """Independent nutrition thresholds, all of which must hold."""

    max_calories: float | None = None
    min_protein: float | None = None
    max_carbs: float | None = None
    max_fat: float | None = None


@dataclass(frozen=True)
class SearchFilters:
    """Filters echoed back with every search result."""

    type: FoodType | None = None
    source: FoodSource | None = None
    nutrition: NutritionFilters | None = None
    sort_by: SortKey = SortKey.RELEVANCE


@dataclass(frozen=True)
class SourceCounts:
    """Number of items each database contributed."""

    usda: int = 0
    openfoodfacts: int = 0
    user: int = 0

    def __add__(self, other: "SourceCounts") -> "SourceCounts":
        return SourceCounts(
            usda=self.usda + other.usda,
            openfoodfacts=self.openfoodfacts + other.openfoodfacts,
            user=self.user + other.user,
        )


class SearchStatus(Enum):
    """Outcome of a search call, so empty results can be told apart."""

    OK = "ok"
    QUERY_TOO_SHORT = "query_too_short"
    ALL_PROVIDERS_FAILED = "all_providers_failed"
    FAILED = "failed"


@dataclass(frozen=True)
class ProviderFailure:
    """Provider error recorded on a search result."""

    provider: str
    kind: ErrorKind
    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class SearchResult:
    """Ordered search results with provenance."""

    items: tuple[CanonicalFoodItem, ...]
    total_found: int
    sources: SourceCounts
    search_time_ms: int
    filters: SearchFilters
    status: SearchStatus = SearchStatus.OK
    message: str = ""
    errors: tuple[ProviderFailure, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a single item lookup."""

    success: bool
    item: CanonicalFoodItem | None
    message: str
    error: ErrorKind | None = None


@dataclass(frozen=True)
class ProductUpload:
    """Product contribution for the branded database."""

    barcode: str
    name: str
    nutrition: NutritionProfile | None = None
    ingredients: str | None = None
    categories: tuple[str, ...] = ()
    countries: tuple[str, ...] = ()
    image: bytes | None = None


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a product upload."""

    success: bool
    barcode: str
    message: str
    error: ErrorKind | None = None


@dataclass(frozen=True)
class NutritionTotals:
    """Macro totals or averages over a set of items."""

    calories: float
    protein: float
    carbohydrates: float
    fat: float


@dataclass(frozen=True)
class NutritionSummary:
    """Totals and averages for a list of items."""

    item_count: int
    totals: NutritionTotals
    average: NutritionTotals


@dataclass(frozen=True)
class ProviderStatus:
    """Health information for one provider."""

    available: bool
    cache_size: int
    last_error: ErrorKind | None = None


@dataclass(frozen=True)
class ServiceStatus:
    """Health information for the aggregation layer."""

    usda: ProviderStatus
    openfoodfacts: ProviderStatus
    available: bool
