TOOL_NAME = "dts-bundle"
VERSION = "0.7.3"

DTS_SUFFIX = ".d.ts"
INDEX_FILE = "index" + DTS_SUFFIX

DEFAULT_INDENT = "    "
DEFAULT_PREFIX = "__"
DEFAULT_SEPARATOR = "/"

# Value of `header_path` that turns the generated header off.
NO_HEADER = "none"

ENV_PREFIX = "DTSBUNDLE_"
