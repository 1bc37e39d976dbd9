"""
Error handling for the catalog PDF generator.

Provides specific exception types for the different failure modes
and error context for debugging and user feedback.
"""

from typing import Dict, List, Any


class CatalogError(Exception):
    """Base exception for all catalog generation errors."""

    def __init__(self, message: str, details: Dict[str, Any] = None, suggestions: List[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'details': self.details,
            'suggestions': self.suggestions
        }


class ValidationError(CatalogError):
    """Raised when caller input validation fails."""
    pass


class ConfigurationError(CatalogError):
    """Raised when configuration is invalid or missing."""
    pass


class ProcessingError(CatalogError):
    """Raised when the generation pipeline fails."""
    pass


class RenderError(ProcessingError):
    """Raised when drawing onto the PDF canvas fails."""
    pass


class LayoutError(RenderError):
    """Raised when the page layout cannot make progress."""
    pass


class ImageFetchError(ProcessingError):
    """Raised inside the image resolver when an image cannot be obtained.

    Never escapes ``ImageResolver.resolve``; the resolver swaps in the
    placeholder image instead.
    """
    pass


# Specific error classes for common failure modes

class EmptyCatalogError(ValidationError):
    """Raised when a catalog is requested for an empty product list."""

    def __init__(self, title: str = None):
        super().__init__(
            "No products selected for the catalog",
            details={'title': title},
            suggestions=[
                "Select at least one product before generating the catalog",
                "Check that the chosen category has active products"
            ]
        )


class InvalidRenderOptionsError(ValidationError):
    """Raised when render options contain an unknown value."""

    def __init__(self, field: str, value: Any, allowed: List[str]):
        super().__init__(
            f"Invalid value for {field}: {value!r}",
            details={
                'field': field,
                'value': value,
                'allowed': allowed
            },
            suggestions=[
                f"Use one of: {', '.join(allowed)}"
            ]
        )


class InvalidProductDataError(ValidationError):
    """Raised when a product record cannot be read."""

    def __init__(self, product_id: Any, reason: str):
        super().__init__(
            f"Invalid product record {product_id}: {reason}",
            details={
                'product_id': product_id,
                'reason': reason
            },
            suggestions=[
                "Ensure every product has an id, a code, a name and a creation date",
                "Check that price fields are numeric"
            ]
        )


class GridOverflowError(LayoutError):
    """Raised when not even one grid card fits on an empty page."""

    def __init__(self, start_y: float, card_height: float, page_height: float):
        super().__init__(
            "Grid card does not fit on an empty page",
            details={
                'start_y': start_y,
                'card_height': card_height,
                'page_height': page_height
            },
            suggestions=[
                "Use the single layout for this catalog",
                "Reduce the header height or card height"
            ]
        )


def create_error_recovery_suggestions(error: Exception, context: Dict[str, Any] = None) -> List[str]:
    """Generate contextual recovery suggestions for any error."""
    suggestions = []

    if isinstance(error, CatalogError):
        suggestions.extend(error.suggestions)

    if context:
        if context.get('missing_images_count', 0) > 0:
            suggestions.append("Some product photos could not be loaded; check their image URLs")

        if context.get('logo_missing'):
            suggestions.append("Check the LOGO_URL setting and the image proxy availability")

    if not suggestions:
        suggestions = [
            "Try generating the catalog again",
            "Contact support if the problem persists"
        ]

    return suggestions
