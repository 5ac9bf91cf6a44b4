#!/usr/bin/env python3
"""
secure-options CLI - Command Line Interface
Encrypts, decrypts and checks protected values in configuration files
"""

import functools
import importlib
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
from loguru import logger as loguru_logger
from rich.console import Console
from rich.table import Table

from secure_options._version import __version__
from secure_options.configuration.sources import (
    SECTION_SEPARATOR,
    MappingConfigurationSource,
    load_document,
    save_document,
)
from secure_options.configuration.binder import new_instance
from secure_options.core.exceptions import MissingConfigurationError, SecureOptionsError
from secure_options.core.logging import logger
from secure_options.core.secure_config import VALID_SCHEMES, VALID_SCOPES, Settings
from secure_options.core.utils.dict_utils import find_key
from secure_options.models.descriptors import FieldKind
from secure_options.models.protection import ProtectionParameters, ProtectionScope
from secure_options.protection.classifier import classify, declared_fields
from secure_options.protection.protectors import AesGcmProtector, FernetProtector, create_protector
from secure_options.protection.walker import GraphWalker, WalkDirection
from secure_options.services.options_service import OptionsService
from secure_options.services.registry import OptionsRegistry

console = Console()

# Stderr sink installed by the group callback
_log_handler_id: Optional[int] = None


def import_type(reference: str) -> type:
    """Resolve a ``package.module:ClassName`` reference."""
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise click.BadParameter(f"Expected 'module:Class', got '{reference}'")
    try:
        target: Any = importlib.import_module(module_name)
        for part in attribute.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as e:
        raise click.BadParameter(f"Cannot import '{reference}': {e}")
    if not isinstance(target, type):
        raise click.BadParameter(f"'{reference}' is not a class")
    return target


def parse_entropy(ctx, param, value: Optional[str]) -> Optional[bytes]:
    """Click callback: hexadecimal entropy to bytes."""
    if value is None:
        return None
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise click.BadParameter("Entropy must be hexadecimal, e.g. 0c300814")


def section_of(document: Dict[str, Any], section: str, options_type: type) -> Dict[str, Any]:
    """Mapping at a ':' separated section of a loaded document."""
    current: Any = document
    for part in [p for p in section.split(SECTION_SEPARATOR) if p]:
        key = find_key(current, (part,)) if isinstance(current, dict) else None
        if key is None:
            raise MissingConfigurationError(options_type.__name__, section)
        current = current[key]
    if not isinstance(current, dict):
        raise MissingConfigurationError(options_type.__name__, section)
    return current


def write_back(options: Any, data: Dict[str, Any], dotted_path: str) -> None:
    """
    Copy the value at ``dotted_path`` of ``options`` into ``data``.

    Keys keep their spelling from the document; aliases are honoured.
    """
    parts = dotted_path.split(".")
    owner = options
    current = data
    for index, name in enumerate(parts):
        declared = next((f for f in declared_fields(type(owner)) if f.name == name), None)
        aliases = declared.aliases if declared is not None else ()
        key = find_key(current, (name,) + aliases)
        if key is None:
            # Value came from a default, not from the document
            return
        owner = getattr(owner, name)
        if index == len(parts) - 1:
            current[key] = owner
        else:
            current = current[key]


def build_protector(settings: Settings, scheme: Optional[str], key_env: Optional[str]):
    return create_protector(
        scheme or settings.get("protection.scheme"),
        key_env or settings.get("protection.key_env"),
    )


def call_site_parameters(
    scope: Optional[str], entropy: Optional[bytes]
) -> Optional[ProtectionParameters]:
    if scope is None and entropy is None:
        return None
    return ProtectionParameters(
        entropy=entropy, scope=ProtectionScope(scope) if scope else None
    )


def default_parameters(settings: Settings) -> ProtectionParameters:
    return ProtectionParameters.resolve(
        None, None, ProtectionParameters(scope=ProtectionScope(settings.get("protection.scope")))
    )


def transform_file(
    direction: WalkDirection,
    file: str,
    type_reference: str,
    section: str,
    scope: Optional[str],
    entropy: Optional[bytes],
    scheme: Optional[str],
    key_env: Optional[str],
    output: Optional[str],
) -> Tuple[List[str], Path]:
    """Bind a section, walk it and write the transformed values back."""
    settings = Settings()
    options_type = import_type(type_reference)
    document = load_document(file)
    data = section_of(document, section, options_type)

    options = new_instance(options_type)
    MappingConfigurationSource(data, section).bind(options)

    result = GraphWalker().walk(
        options,
        direction,
        build_protector(settings, scheme, key_env),
        call_site_parameters(scope, entropy),
        default_parameters(settings),
    )

    for path in result.transformed:
        write_back(options, data, path)

    target = Path(output or file)
    save_document(target, document)
    logger.info(
        "File transformed",
        direction=direction.value,
        file=str(target),
        fields=len(result.transformed),
    )
    return result.transformed, target


def debug_enabled() -> bool:
    """True if SECURE_OPTIONS_DEBUG is set or the group loaded debug_mode from settings."""
    ctx = click.get_current_context(silent=True)
    from_settings = bool(ctx is not None and (ctx.find_root().obj or {}).get("debug"))
    return from_settings or bool(os.environ.get("SECURE_OPTIONS_DEBUG"))


def reports_errors(command):
    """Print secure-options errors in red with their suggestions and exit with status 1."""

    @functools.wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except SecureOptionsError as e:
            debug = debug_enabled()
            logger.error("Command failed", include_trace=debug, error_id=e.id, code=e.code)
            click.echo(click.style(f"✗ {e}", fg="red"))
            for suggestion in e.suggestions:
                click.echo(f"  → {suggestion}")
            if debug:
                import traceback

                traceback.print_exc()
            sys.exit(1)

    return wrapper


def configure_logging(level: str) -> None:
    """Re-enable library logging for the CLI, on stderr at ``level``."""
    global _log_handler_id
    loguru_logger.enable("secure_options")
    if _log_handler_id is not None:
        loguru_logger.remove(_log_handler_id)
    else:
        # loguru's default stderr handler would print every record twice
        try:
            loguru_logger.remove(0)
        except ValueError:
            pass
    _log_handler_id = loguru_logger.add(
        lambda message: click.echo(message, err=True, nl=False),
        level=level,
        format="{time:HH:mm:ss} | {level} | {extra[component]} | {message}",
        filter="secure_options",
    )


# Shared options of encrypt and decrypt
def protection_options(command):
    decorators = [
        click.option("--type", "type_reference", required=True, help="Settings class, as module:Class"),
        click.option("--section", default="", help="Section holding the settings, e.g. Services:Mail"),
        click.option("--scope", type=click.Choice(VALID_SCOPES), help="Protection scope override"),
        click.option("--entropy", callback=parse_entropy, help="Entropy override, hexadecimal"),
        click.option("--scheme", type=click.Choice(VALID_SCHEMES), help="Protector scheme"),
        click.option("--key-env", help="Environment variable holding the key"),
        click.option("--output", type=click.Path(dir_okay=False), help="Write here instead of in place"),
    ]
    for decorator in reversed(decorators):
        command = decorator(command)
    return command


@click.group()
@click.version_option(version=__version__, prog_name="secure-options")
@click.option("--verbose", is_flag=True, help="Show library log output")
@click.pass_context
@reports_errors
def cli(ctx: click.Context, verbose: bool):
    """
    secure-options - Encrypted fields for typed application settings

    Keys are read from the environment variable configured in
    .secure-options.yaml (SECURE_OPTIONS_KEY by default).
    """
    settings = Settings()
    ctx.obj = {"debug": bool(settings.get("logging.debug_mode"))}
    configure_logging("DEBUG" if verbose else str(settings.get("logging.level")).upper())


@cli.command()
@click.option("--scheme", type=click.Choice(VALID_SCHEMES), default="aesgcm", show_default=True)
def keygen(scheme: str):
    """Print a new random key for the chosen scheme"""
    if scheme == "fernet":
        click.echo(FernetProtector.generate_secret())
    else:
        click.echo(AesGcmProtector.generate_secret())


@cli.command()
@click.argument("type_reference", metavar="TYPE")
@reports_errors
def inspect(type_reference: str):
    """Show which fields of a settings class are protected"""
    options_type = import_type(type_reference)
    plan = classify(options_type)

    table = Table(title=f"{options_type.__name__} field plan")
    table.add_column("Field", style="cyan")
    table.add_column("Kind")
    table.add_column("Type")
    table.add_column("Entropy")
    table.add_column("Scope")

    for descriptor in plan:
        entropy = scope = ""
        if descriptor.kind is FieldKind.PROTECTED_STRING and descriptor.protection is not None:
            entropy = descriptor.protection.entropy.hex() if descriptor.protection.entropy else "default"
            scope = descriptor.protection.scope.value if descriptor.protection.scope else "default"
        field_type = getattr(descriptor.field_type, "__name__", str(descriptor.field_type))
        table.add_row(descriptor.name, descriptor.kind.value, field_type, entropy, scope)

    console.print(table)
    if not plan:
        console.print("[yellow]No protected or nested fields found[/yellow]")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@protection_options
@reports_errors
def encrypt(file, type_reference, section, scope, entropy, scheme, key_env, output):
    """Encrypt the protected values of a configuration file"""
    transformed, target = transform_file(
        WalkDirection.ENCRYPT, file, type_reference, section, scope, entropy, scheme, key_env, output
    )
    click.echo(click.style(f"✓ Encrypted {len(transformed)} field(s) in {target}", fg="green"))
    for path in transformed:
        click.echo(f"  {path}")
    if entropy is None:
        click.echo(
            click.style(
                "! Fields without their own entropy use the built-in default entropy",
                fg="yellow",
            )
        )


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@protection_options
@reports_errors
def decrypt(file, type_reference, section, scope, entropy, scheme, key_env, output):
    """Decrypt the protected values of a configuration file"""
    transformed, target = transform_file(
        WalkDirection.DECRYPT, file, type_reference, section, scope, entropy, scheme, key_env, output
    )
    click.echo(click.style(f"✓ Decrypted {len(transformed)} field(s) in {target}", fg="green"))
    for path in transformed:
        click.echo(f"  {path}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--type", "type_reference", required=True, help="Settings class, as module:Class")
@click.option("--section", default="", help="Section holding the settings")
@click.option("--decrypt/--no-decrypt", "decrypt_values", default=True, help="Decrypt before validating")
@click.option("--scheme", type=click.Choice(VALID_SCHEMES), help="Protector scheme")
@click.option("--key-env", help="Environment variable holding the key")
@reports_errors
def check(file, type_reference, section, decrypt_values, scheme, key_env):
    """Bind, decrypt and validate a settings section"""
    settings = Settings()
    options_type = import_type(type_reference)
    source = MappingConfigurationSource(load_document(file)).section(section)

    registry = OptionsRegistry()
    service = OptionsService(
        protector=build_protector(settings, scheme, key_env) if decrypt_values else None,
        register=registry.register,
        default_parameters=default_parameters(settings),
    )
    result = service.try_bind(options_type, source)

    if result.succeeded:
        click.echo(
            click.style(f"✓ {options_type.__name__} is valid ({result.stage.value})", fg="green")
        )
        return

    if result.options is None:
        click.echo(click.style(f"✗ Section '{section}' is missing or empty", fg="red"))
        sys.exit(1)

    table = Table(title=f"{options_type.__name__} validation errors")
    table.add_column("Field", style="cyan")
    table.add_column("Message", style="red")
    for path, messages in result.errors.items():
        for message in messages:
            table.add_row(path, message)
    console.print(table)
    sys.exit(1)


def main():
    """Main entry point"""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user.")
        sys.exit(0)
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"))
        if os.environ.get("SECURE_OPTIONS_DEBUG"):
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
