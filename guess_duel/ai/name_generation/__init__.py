from .generator import NameGenerator
