"""The Lens → SubLens → Theme hierarchy.

``LensCatalog`` validates the hierarchy once at construction and is
immutable afterwards.  ``NINE_LENSES`` is the full 9Vectors schema.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

CATEGORY_ASSETS = "Assets"
CATEGORY_PROCESSES = "Processes"
CATEGORY_STRUCTURES = "Structures"

MIN_SCORE = 0
MAX_SCORE = 9
DEFAULT_SCORE = 5  # slider position before a theme is scored


class CatalogError(ValueError):
    """Raised for a hierarchy with an empty level or duplicate ids."""


@dataclass(frozen=True)
class SubLens:
    id: str
    name: str
    themes: tuple[str, ...]


@dataclass(frozen=True)
class Lens:
    id: int
    name: str
    category: str
    sub_lenses: tuple[SubLens, ...]
    description: str = ""
    color: str = ""


class LensCatalog:
    """Ordered, validated collection of lenses."""

    def __init__(self, lenses: Sequence[Lens]) -> None:
        if not lenses:
            raise CatalogError("Catalog needs at least one lens")
        seen_lenses: set[int] = set()
        for lens in lenses:
            if lens.id in seen_lenses:
                raise CatalogError(f"Duplicate lens id {lens.id}")
            seen_lenses.add(lens.id)
            if not lens.sub_lenses:
                raise CatalogError(f"Lens {lens.id} has no sub-lenses")
            seen_subs: set[str] = set()
            for sub in lens.sub_lenses:
                if sub.id in seen_subs:
                    raise CatalogError(f"Duplicate sub-lens id {sub.id} in lens {lens.id}")
                seen_subs.add(sub.id)
                if not sub.themes:
                    raise CatalogError(f"Sub-lens {sub.id} has no themes")

        self.lenses: tuple[Lens, ...] = tuple(lenses)
        self.total_themes: int = sum(
            len(sub.themes) for lens in self.lenses for sub in lens.sub_lenses
        )
        self._index = {lens.id: i for i, lens in enumerate(self.lenses)}

    def __len__(self) -> int:
        return len(self.lenses)

    def __iter__(self):
        return iter(self.lenses)

    def __getitem__(self, index: int) -> Lens:
        return self.lenses[index]

    def index_of(self, lens_id: int) -> int | None:
        return self._index.get(lens_id)

    def theme(self, lens_id: int, sub_lens_id: str, theme_index: int) -> str | None:
        """Return the theme text, or None if the key is not in the catalog."""
        i = self._index.get(lens_id)
        if i is None:
            return None
        for sub in self.lenses[i].sub_lenses:
            if sub.id == sub_lens_id:
                if 0 <= theme_index < len(sub.themes):
                    return sub.themes[theme_index]
                return None
        return None

    @property
    def total_sub_lenses(self) -> int:
        return sum(len(lens.sub_lenses) for lens in self.lenses)


def score_label(score: int) -> str:
    if score >= 7:
        return "Strong"
    if score >= 4:
        return "Moderate"
    return "Weak"


def score_color(score: int) -> str:
    if score >= 7:
        return "#10b981"
    if score >= 4:
        return "#f59e0b"
    return "#ef4444"


def _sub(id: str, name: str, *themes: str) -> SubLens:
    return SubLens(id=id, name=name, themes=themes)


NINE_LENSES = LensCatalog([
    Lens(
        id=1,
        name="Market",
        category=CATEGORY_ASSETS,
        description="Understanding the market, opportunity, and competitive landscape",
        color="#10b981",
        sub_lenses=(
            _sub("1.1", "Market Characteristics", "Market Size", "Market Trends and Sustainability",
                 "Market Regulations", "Market Entry Barriers", "Market Volatility", "Geography Footprint"),
            _sub("1.2", "Competition", "Market Share", "Competitive Landscape", "Leadership %",
                 "Competitive Forecast"),
            _sub("1.3", "Customer", "Demographics", "Adoption Curve", "Loyalty / NPS", "Purchasing Pattern",
                 "Purchasing Power", "Relationships", "Buyer-User-Consumer Harmony"),
            _sub("1.4", "Market Positioning", "Brand Image / Perception", "Brand Awareness",
                 "Industry Influence", "Target Market", "Threats"),
            _sub("1.5", "Market Timing", "Government Influence", "Market Cycles & Trends", "Demand",
                 "Adoption Curve", "Customer Readiness", "Exit Paths"),
        ),
    ),
    Lens(
        id=2,
        name="People",
        category=CATEGORY_ASSETS,
        description="Employee characteristics, culture, leadership, and organizational design",
        color="#3b82f6",
        sub_lenses=(
            _sub("2.1", "Employee Characteristics", "Employee Strengths", "Employee Skills",
                 "Employee Values", "Employee Experience & Training"),
            _sub("2.2", "Culture", "Attitudes", "Values", "Teamwork", "Cultural Unity and Diversity",
                 "Reputation"),
            _sub("2.3", "Leadership", "Leadership Skills", "Leadership Style", "M13 Attributes"),
            _sub("2.4", "Organizational Design", "Organizational Chart", "Functional Alignment",
                 "Key Employees", "Roles"),
        ),
    ),
    Lens(
        id=3,
        name="Financial",
        category=CATEGORY_ASSETS,
        description="Accounting, capital structure, financial model, and performance",
        color="#8b5cf6",
        sub_lenses=(
            _sub("3.1", "Accounting", "Accounting Cycle", "Audits", "Statements and Reporting",
                 "Billing and Collections", "Compliance"),
            _sub("3.2", "Capital Structure", "Capital Requirements", "Rights", "Cost of Capital",
                 "Cap Structure"),
            _sub("3.3", "Financial Model", "P&L", "Revenue Model", "Touch (Snapshot9)",
                 "Volume (Snapshot9)", "Margin (Snapshot9)"),
            _sub("3.4", "Forecasting", "Pro Forma", "Resources", "Predictability", "Churn", "MRR/ARR"),
            _sub("3.5", "Historical Performance", "Balance Sheet", "Use of Cash",
                 "Statement of Cash Flows"),
        ),
    ),
    Lens(
        id=4,
        name="Strategy",
        category=CATEGORY_PROCESSES,
        description="Vision, mission, offerings, pricing, and go-to-market strategy",
        color="#f59e0b",
        sub_lenses=(
            _sub("4.1", "Delivery Outlets", "Direct Sales", "Distributors & Resellers",
                 "Partnerships & Alliances", "Licensing"),
            _sub("4.2", "General Strategy", "Mission, Vision, Objectives", "Corporate Strategy",
                 "Differentiation Strategy", "Value Proposition", "Innovation"),
            _sub("4.3", "Offerings", "Services", "Products", "Complexity"),
            _sub("4.4", "Pricing Strategy", "Current Pricing", "Future Offering Practices"),
            _sub("4.5", "Promotion", "Go To Market Strategy", "Promotional Media", "Shows and Events",
                 "Social Media"),
        ),
    ),
    Lens(
        id=5,
        name="Operations",
        category=CATEGORY_PROCESSES,
        description="Infrastructure, processes, systems, and operational efficiency",
        color="#06b6d4",
        sub_lenses=(
            _sub("5.1", "General Operations", "Functional Operations", "Cross Function Alignment"),
            _sub("5.2", "Infrastructure", "Capacity", "Physical Infrastructure", "Security"),
            _sub("5.3", "Processes", "Methodologies & Best Practices", "Internal Function Processes",
                 "Process Planning", "Process Evaluation"),
            _sub("5.4", "Systems", "Private Online Systems", "Hybrid Online Systems",
                 "Public Cloud Systems", "Back Office Systems", "Front Office Systems"),
        ),
    ),
    Lens(
        id=6,
        name="Execution",
        category=CATEGORY_PROCESSES,
        description="Measurement, performance, and strategic execution",
        color="#ec4899",
        sub_lenses=(
            _sub("6.1", "Measurement", "Function Metrics", "Cross-Function Metrics",
                 "Metric Characteristics", "Impacts", "Deployment"),
            _sub("6.2", "Performance", "Function Performance", "Cross-Function Performance",
                 "Communication", "Benchmarking"),
        ),
    ),
    Lens(
        id=7,
        name="Expectations",
        category=CATEGORY_STRUCTURES,
        description="Managing expectations of all stakeholders",
        color="#84cc16",
        sub_lenses=(
            _sub("7.1", "All Stakeholders", "Owner Expectations", "Leader Engagement",
                 "Current Ownership", "Self-Awareness", "Alignment"),
            _sub("7.2", "Board and Shareholders", "Expectation Setting", "Goals and Objectives",
                 "Self-Awareness"),
            _sub("7.3", "Customers", "Expectation Setting", "Addressing Expectations", "Performance"),
            _sub("7.4", "Employees", "Expectation Setting", "Addressing Expectations",
                 "Compensation and Benefits", "Leadership", "Environment and Values"),
            _sub("7.5", "Partners", "Expectation Setting", "Partnership Characteristics", "Formality"),
        ),
    ),
    Lens(
        id=8,
        name="Governance",
        category=CATEGORY_STRUCTURES,
        description="Principles, structure, and practices of corporate governance",
        color="#6366f1",
        sub_lenses=(
            _sub("8.1", "Practices", "Corporate Social Responsibility", "Document Storage",
                 "Legal Compliance", "Transparency", "Policies"),
            _sub("8.2", "Principles", "Internal Codes", "Use of Assets", "Media Relations",
                 "Core Values", "Hiring and Compensation"),
            _sub("8.3", "Structure", "Board Composition", "Board Engagement", "Board Committees",
                 "Outside Legal Counsel", "Third Party Audits"),
        ),
    ),
    Lens(
        id=9,
        name="Entity",
        category=CATEGORY_STRUCTURES,
        description="Legal entity structure, contracts, IP, and risk management",
        color="#ef4444",
        sub_lenses=(
            _sub("9.1", "Entity Characteristics", "Type of Entity", "Regulation", "Domicile"),
            _sub("9.2", "Contracts", "Employee Contracts", "Vendor Contracts", "Customer Contracts",
                 "Partners and Alliances"),
            _sub("9.3", "Intellectual Property", "Trademark and Service Mark", "Copyrights", "Patents",
                 "Trade Secrets"),
            _sub("9.4", "Liability and Risk", "Insurance", "Risk Communication", "Litigation",
                 "Risk Management"),
        ),
    ),
])
