from .logger import setup_logger, get_logger, set_verbosity
from .report import write_method, report_filename
