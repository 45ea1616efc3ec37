"""Assessment survey: the lens hierarchy and page-by-page navigation."""

from ninevectors.survey.catalog import (
    NINE_LENSES,
    CatalogError,
    Lens,
    LensCatalog,
    SubLens,
    score_label,
)
from ninevectors.survey.navigator import (
    Response,
    ResponseKey,
    SurveyNavigator,
    SurveyState,
    UnknownThemeError,
    reduce_survey,
)

__all__ = [
    "NINE_LENSES",
    "CatalogError",
    "Lens",
    "LensCatalog",
    "Response",
    "ResponseKey",
    "SubLens",
    "SurveyNavigator",
    "SurveyState",
    "UnknownThemeError",
    "reduce_survey",
    "score_label",
]
