# backend/rokko_survey/services/exceptions.py

class SurveyDataError(Exception):
    """Base exception for survey data errors."""
    pass

class UnknownCategoryError(SurveyDataError):
    """Raised when a category name is not traffic, parking or weather."""
    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Unknown data category '{category}'.")

class DataSourceError(SurveyDataError):
    """Base exception for remote data source failures."""
    pass

class FetchFailedError(DataSourceError):
    """Raised on transport failure or a non-success response status."""
    def __init__(self, category: str, reason: str):
        self.category = category
        self.reason = reason
        super().__init__(f"Failed to fetch {category} data: {reason}")

class ParseFailedError(DataSourceError):
    """Raised when a response body is not a JSON array of records."""
    def __init__(self, category: str, reason: str):
        self.category = category
        self.reason = reason
        super().__init__(f"Failed to parse {category} data: {reason}")

class CsvParseError(SurveyDataError):
    """Raised when an uploaded CSV payload cannot be read."""
    pass
