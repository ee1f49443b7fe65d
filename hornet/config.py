"""
Run-wide knobs for the type analysis, in the shape a compiler driver
would hand them over: parsed from command-line style options.

	Config.from_args(["--show", "type-analysis", "-v"])

Config() with no arguments gives the defaults.
"""
import argparse
from typing import Optional, Sequence

DEFAULT_MAX_ITERATIONS = 100

def _positive(text: str) -> int:
	value = int(text)
	if value < 1:
		raise argparse.ArgumentTypeError("need at least one round, not %d" % value)
	return value

parser = argparse.ArgumentParser(
	prog="hornet",
	description="Type inference and overload resolution for Datalog programs.",
)
parser.add_argument("--show", action="append", default=[], metavar="WHAT", help="Show a debug report; 'type-analysis' shows the annotated type analysis.")
parser.add_argument("--debug-report", action="store_true", help="Collect every debug report, the type analysis among them.")
parser.add_argument("--max-iterations", type=_positive, default=DEFAULT_MAX_ITERATIONS, help="Give up on type analysis after this many rounds.")
parser.add_argument('-v', "--verbose", action="count", default=0, help="Say more about what is going on.")

class Config:
	def __init__(self, options: Optional[argparse.Namespace] = None):
		self._options = options if options is not None else parser.parse_args([])
		assert self._options.max_iterations > 0, "The analysis needs at least one round"
	
	@staticmethod
	def from_args(argv: Sequence[str]) -> "Config":
		return Config(parser.parse_args(list(argv)))
	
	@property
	def verbose(self) -> int: return self._options.verbose
	
	@property
	def max_iterations(self) -> int: return self._options.max_iterations
	
	def has(self, key: str, value: Optional[str] = None) -> bool:
		"""
		Was this option given at all, or (with a value) was it given that value?
		Repeatable options like --show count as having each of their values.
		"""
		attr = key.replace("-", "_")
		setting = getattr(self._options, attr, None)
		if value is None:
			return bool(setting)
		if isinstance(setting, list):
			return value in setting
		return setting == value
	
	def wants_type_analysis_report(self) -> bool:
		return self.has("debug_report") or self.has("show", "type-analysis")
