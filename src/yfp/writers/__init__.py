"""Writer subpackage — imports trigger @register_writer decorators."""

from yfp.writers.csv_file import CSVWriter  # noqa: F401
from yfp.writers.json_file import JSONWriter  # noqa: F401
