# backend/rokko_survey/__init__.py
# Data acquisition and normalization backend for the Rokko / Maya traffic survey dashboard.
import logging

logger = logging.getLogger(__name__)
logger.debug("rokko_survey package initialized.")
