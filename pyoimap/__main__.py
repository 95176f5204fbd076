from __future__ import annotations

import logging
from collections.abc import Iterable

import typer

from pyoimap.configurations import Configurations
from pyoimap.containers import OrderedInsertionContainer
from pyoimap.enums import Order, Variant
from pyoimap.errors import ConfigurationError
from pyoimap.maps import InsertionHashMap, InsertionHashMultimap, InsertionMap, InsertionMultimap

app = typer.Typer()


def parse_pairs(pairs: Iterable[str]) -> list[tuple[str, str]]:
    parsed = []
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator:
            raise typer.BadParameter(f"expected KEY=VALUE, got {pair!r}")
        parsed.append((key, value))
    return parsed


def build_configurations(settings: Iterable[str]) -> Configurations:
    configurations = Configurations()
    for name, value in parse_pairs(settings):
        try:
            configurations.set_value(name, value)
        except ConfigurationError as e:
            raise typer.BadParameter(str(e)) from e
    return configurations


def create_container(variant: Variant, configurations: Configurations) -> OrderedInsertionContainer[str, str]:
    match variant:
        case Variant.MAP:
            return InsertionMap()
        case Variant.MULTIMAP:
            return InsertionMultimap()
        case Variant.HASH_MAP:
            return InsertionHashMap(configurations=configurations)
        case Variant.HASH_MULTIMAP:
            return InsertionHashMultimap(configurations=configurations)


def format_items(items: Iterable[tuple[str, str]]) -> str:
    return ", ".join(f"{key}={value}" for key, value in items)


@app.callback()
def main(verbose: bool = False) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


@app.command()
def show(
    pairs: list[str] = typer.Argument(..., help="entries to insert, as KEY=VALUE"),
    variant: Variant = Variant.MAP,
    erase: list[str] | None = typer.Option(None, "--erase", help="keys to erase after inserting"),
    config: list[str] | None = typer.Option(None, "--config", help="hashed index settings, as NAME=VALUE"),
    order: list[Order] | None = typer.Option(None, "--order", help="listings to print, defaults to both"),
) -> None:
    """Insert entries into a container and print it in sequence and index order."""
    container = create_container(variant, build_configurations(config or []))
    container.insert_many(parse_pairs(pairs))
    for key in erase or []:
        container.erase(key)

    typer.echo(f"size: {len(container)}")
    for listing in order or list(Order):
        items = container.items() if listing == Order.SEQUENCE else container.index_items()
        typer.echo(f"{listing}: {format_items(items)}")


@app.command()
def buckets(
    pairs: list[str] = typer.Argument(..., help="entries to insert, as KEY=VALUE"),
    multi: bool = False,
    config: list[str] | None = typer.Option(None, "--config", help="hashed index settings, as NAME=VALUE"),
) -> None:
    """Print the bucket layout of a hashed container."""
    configurations = build_configurations(config or [])
    container: InsertionHashMap[str, str] | InsertionHashMultimap[str, str]
    if multi:
        container = InsertionHashMultimap(parse_pairs(pairs), configurations=configurations)
    else:
        container = InsertionHashMap(parse_pairs(pairs), configurations=configurations)

    typer.echo(f"buckets: {container.bucket_count} load factor: {container.load_factor:.2f}")
    for number in range(container.bucket_count):
        if container.bucket_size(number):
            typer.echo(f"{number}: {format_items(container.iter_bucket(number))}")


if __name__ == "__main__":
    app()
