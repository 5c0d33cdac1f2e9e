"""CLI entrypoint for aws-secrets-dumper."""
import os
import sys
import argparse
import logging
from pathlib import Path

from .validators import validate_prefix

VERSION = "0.1.0"

LOG_LEVEL_ENV = "ASD_LOG_LEVEL"
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

logger = logging.getLogger(__name__)


def resolve_log_level(level_name):
    """Map an ASD_LOG_LEVEL value to a logging level, or None if unknown."""
    return LOG_LEVELS.get((level_name or "INFO").strip().upper() or "INFO")


def configure_logging() -> None:
    """Send diagnostics to stderr at the level named by ASD_LOG_LEVEL (default INFO)."""
    level_name = os.getenv(LOG_LEVEL_ENV, "INFO")
    level = resolve_log_level(level_name)

    logging.basicConfig(
        level=level if level is not None else logging.INFO,
        format="%(message)s",
        stream=sys.stderr
    )
    if level is None:
        logger.warning(f"Unknown {LOG_LEVEL_ENV} '{level_name}', using INFO")


def _build_service(args):
    """Resolve the secret service for --target with config file and flag overrides."""
    from aws_secrets_dumper.secrets.domains.config_loader import load_config
    from aws_secrets_dumper.secrets.workflows.secret_services import resolve_service

    validate_prefix(args.target, args.prefix)
    settings = load_config()

    return resolve_service(
        args.target,
        region=args.region or settings.region,
        profile=args.profile or settings.profile,
        throttle_seconds=settings.throttle_seconds,
    )


def cmd_dump(args):
    """Dump secrets as YAML to stdout."""
    from aws_secrets_dumper.secrets.domains.models import Filter
    from aws_secrets_dumper.secrets.workflows.dumper import Dumper

    service = _build_service(args)
    secrets = service.retrieve_secrets(Filter(prefix=args.prefix))

    dumper = Dumper(sys.stdout, prefix_to_remove=args.prefix if args.remove_prefix else "")
    dumper.dump(secrets)


def cmd_generate_tf(args):
    """Print Terraform resources for the secrets under --prefix."""
    from aws_secrets_dumper.secrets.domains.models import Filter

    service = _build_service(args)
    service.generate_tf(Filter(prefix=args.prefix), sys.stdout)


def cmd_generate_imports(args):
    """Print `terraform import` commands for the secrets under --prefix."""
    from aws_secrets_dumper.secrets.domains.models import Filter

    service = _build_service(args)
    service.generate_imports(Filter(prefix=args.prefix), sys.stdout)


def cmd_version(args):
    """Show version information."""
    print(f"aws-secrets-dumper {VERSION}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from aws_secrets_dumper.secrets.domains.preferences import set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference("config_path", str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show which config file would be used."""
    from aws_secrets_dumper.secrets.domains.config_loader import CONFIG_PATH_ENV, default_config_path
    from aws_secrets_dumper.secrets.domains.preferences import get_preference

    env_path = os.getenv(CONFIG_PATH_ENV)
    config_path_pref = get_preference("config_path")

    if env_path:
        print(f"Config path: {Path(env_path).expanduser()}")
        print(f"Source: environment ({CONFIG_PATH_ENV})")
    elif config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        if default_config.exists():
            print("Source: default")
        else:
            print("Source: default (file not found, built-in defaults apply)")


def cmd_config_clear(args):
    """Clear config path preference."""
    from aws_secrets_dumper.secrets.domains.config_loader import default_config_path
    from aws_secrets_dumper.secrets.domains.preferences import clear_preference

    clear_preference("config_path")
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def _add_target_arguments(parser, remove_prefix=False):
    parser.add_argument(
        "--target",
        required=True,
        choices=["ssm", "secretsmanager"],
        help="Secret store to read: 'ssm' (Parameter Store) or 'secretsmanager'"
    )
    parser.add_argument(
        "--prefix",
        default="",
        help="Name prefix to read under (required for ssm, e.g. '/app/')"
    )
    if remove_prefix:
        parser.add_argument(
            "--remove-prefix",
            action="store_true",
            help="Remove the prefix from keys in the dump result"
        )
    parser.add_argument(
        "--region",
        help="AWS region (overrides config file and AWS_DEFAULT_REGION)"
    )
    parser.add_argument(
        "--profile",
        help="AWS profile from the shared credentials file (overrides config file)"
    )


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (AWS API failure, config file error, rendering, etc.)
        2 - Usage errors (invalid arguments, invalid prefix, etc.)
    """
    parser = argparse.ArgumentParser(
        prog="aws-secrets-dumper",
        description="Dump secrets from AWS SSM Parameter Store or Secrets Manager as YAML or Terraform",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (AWS API failure, config file error, rendering, etc.)
  2 - Usage error (invalid arguments, invalid prefix, etc.)

Environment variables:
  ASD_LOG_LEVEL              - DEBUG, INFO, WARN or ERROR (default: INFO)
  AWS_SECRETS_DUMPER_CONFIG  - Config file path (overrides preference and default)

Configuration:
  Default location: ~/.config/aws-secrets-dumper/config.yml (optional)
  Custom path: Set with 'aws-secrets-dumper config set-path <path>'
  AWS credentials are resolved through the standard AWS credential chain.
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of aws-secrets-dumper"
    )

    # dump command
    dump_parser = subparsers.add_parser(
        "dump",
        help="Dump secrets as YAML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Read every secret under --prefix and print a YAML document to stdout:

  <key>:
    description: <description>
    value: <value>

Values are printed in plain text. Encrypt the result (e.g. with sops) before
storing it anywhere.
        """
    )
    _add_target_arguments(dump_parser, remove_prefix=True)

    # generate command
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate Terraform code",
        description="Generate Terraform code for managing the dumped secrets"
    )
    generate_subparsers = generate_parser.add_subparsers(dest="generate_command")

    generate_tf_parser = generate_subparsers.add_parser(
        "tf",
        help="Print Terraform resources",
        description="""
Print Terraform resources that read secrets.encrypted.yml through the sops
provider. For ssm, an import block is printed for each existing parameter.
        """
    )
    _add_target_arguments(generate_tf_parser)

    generate_imports_parser = generate_subparsers.add_parser(
        "imports",
        help="Print terraform import commands",
        description="Print one 'terraform import' command per existing resource"
    )
    _add_target_arguments(generate_imports_parser)

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage aws-secrets-dumper configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="""
Set the configuration file path preference.

This stores the absolute path to your config file in:
~/.config/aws-secrets-dumper/preferences.json
        """
    )
    config_set_path_parser.add_argument(
        "path",
        help="Path to config file"
    )

    config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="Display the configuration file path and its source"
    )

    config_subparsers.add_parser(
        "clear",
        help="Clear config path preference",
        description="Remove the config path preference and fall back to the default location"
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    configure_logging()

    from aws_secrets_dumper.secrets.domains.errors import DumperError, UnknownTargetError

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "dump":
            cmd_dump(args)
        elif args.command == "generate":
            if args.generate_command == "tf":
                cmd_generate_tf(args)
            elif args.generate_command == "imports":
                cmd_generate_imports(args)
            else:
                generate_parser.print_help()
                sys.exit(2)
        elif args.command == "config":
            if args.config_command == "set-path":
                cmd_config_set_path(args)
            elif args.config_command == "show":
                cmd_config_show(args)
            elif args.config_command == "clear":
                cmd_config_clear(args)
            else:
                config_parser.print_help()
                sys.exit(2)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except UnknownTargetError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except DumperError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
