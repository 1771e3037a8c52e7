# backend/rokko_survey/services/__init__.py
# Service singletons live in .services; import them from there to keep this package import-light.
import logging

logger = logging.getLogger(__name__)
logger.debug("rokko_survey.services package initialized.")
