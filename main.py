import sys

from rich.console import Console
from rich.pretty import pprint

from typecmd import *

__prog__ = "config"

console = Console()

usage = command("help", "Print this help message")
schema = command("schema", "Print JTD")
defaults = command("defaults", "Print default JSON")
everything = command("all", "Print current config JSON")
keys = command("list", "List all available configuration keys", "[subkey]").with_args(str | None)
get = (
    command("get", "Get configuration key", "<key> [-xyz]")
    .with_args(str, str | None)
    .with_options("x", "y", "z", "--raw")
)
clear = command("clear", "Clear configuration key", "<key>").with_args(str).with_aliases("rm")
put = command("put", "Store key value", "<key> <value>").with_args(str, str)
subscribe = command("subscribe", "Subscribe to configuration key(s) and receive updates", "<key...>").with_args(list[str])
verify = command("verify", "Verify secret", "<key> <secret>").with_args(str, str)
resize = command("resize", "Set the storage quota of a key", "<key> <bytes>").with_args(str, UInt32)

commands = (usage, schema, defaults, everything, keys, get, clear, put, subscribe, verify, resize)


if __name__ == '__main__':
    result = parse(sys.argv, commands, colorful=True)

    if result.is_(schema):
        console.print("schema")
    elif result.is_(put):
        key, value = result.get_args(put)
        console.print("put", key, value)
    elif result.is_(keys):
        subkey, = result.get_args(keys)
        console.print("list", *filter(None, [subkey]))
    elif result.is_(get):
        key, flags = result.get_args(get)
        console.print("get", key, *filter(None, [flags]), *sorted(result.options))
    elif result.is_(subscribe):
        names, = result.get_args(subscribe)
        console.print("subscribe", *names)
    elif result.is_(resize):
        key, size = result.get_args(resize)
        console.print("resize", key, size)
    elif result:
        pprint(result)
    else:
        console.print(result.help, end="")

    if result.unknown_options:
        console.print("ignored options:", ", ".join(sorted(result.unknown_options)))
