import sys

from rich.console import Console
from rich.pretty import pprint

from registrar import *

__prog__ = "registrar-demo"

registry = Registry(fancy=True)
verbose = registry.flag("v").alternate("verbose").description("Chatty output")
count = registry.value("n", int).alternate("count").default(1).description("Repetitions")
config = registry.file("c").alternate("config").description("Settings file")


if __name__ == '__main__':
    console = Console()
    if not registry.read(sys.argv):
        registry.report()
        console.print(registry)
        sys.exit(1)
    pprint(registry)
    pprint(list(registry))
    print(registry.usage())
    print("anonymous:", registry.anonymous)
