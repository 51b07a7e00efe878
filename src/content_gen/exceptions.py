"""
Custom exceptions for article generation, validation and storage.
"""

class ContentGenError(Exception):
    """Base exception for content generation operations"""
    pass

class ConfigurationError(ContentGenError):
    """Raised when configuration is invalid or missing"""
    pass

class UnknownCategoryError(ContentGenError):
    """Raised when an article category is absent or not a known category"""

    def __init__(self, category):
        self.category = category
        super().__init__(f"Invalid category: {category}")

class GenerationError(ContentGenError):
    """Raised when an article cannot be generated from the LLM response"""

    def __init__(self, message, issues=None):
        super().__init__(message)
        self.issues = issues or []

class DatabaseError(ContentGenError):
    """Raised when database operations fail"""
    pass

class EmbeddingError(ContentGenError):
    """Raised when embedding generation fails"""
    pass
