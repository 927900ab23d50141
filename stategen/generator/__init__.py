"""stategen state container generator."""

from .extractor import ConstructorParameter as ConstructorParameter
from .extractor import DataclassMetadataProvider as DataclassMetadataProvider
from .extractor import MetadataError as MetadataError
from .extractor import MetadataProvider as MetadataProvider
from .extractor import describe_type as describe_type
from .extractor import extract as extract
from .processor import ProcessReport as ProcessReport
from .processor import process as process
from .python import render as render_module
from .python import synthesize as synthesize
from .schema import classify as classify
from .signature import ParseError as ParseError
from .signature import parse as parse
from .signature import render as render
from .types import *
