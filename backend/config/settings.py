import os

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))

DATA_DIR = os.environ.get("TRANSCRIPT_DATA_DIR", os.path.join(PROJECT_ROOT, "data"))
LOG_LEVEL = os.environ.get("TRANSCRIPT_LOG_LEVEL", "INFO").upper()

# keys of the JSON configuration documents in the store
REQUIREMENTS_KEY = "CourseEquivalents.json"
MERIT_COURSES_KEY = "CoursesForAverage.json"
CATALOG_KEY = "CourseCatalog.json"
