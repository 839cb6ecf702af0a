"""Concrete encoders, one per content format."""

from .cbor import CBOREncoder
from .json import JSONEncoder
from .smile import SmileEncoder
from .yaml import YAMLEncoder
