"""Input validation for CLI arguments."""
import sys


def validate_prefix(target: str, prefix: str) -> None:
    """
    Validate --prefix for the chosen target.

    Parameter Store hierarchies start with a forward slash, so the ssm target
    requires a prefix such as '/' or '/app/'. Secrets Manager accepts any
    prefix, including an empty one (all secrets).

    Raises:
        SystemExit with code 2 if validation fails
    """
    if target != "ssm":
        return

    if not prefix:
        print("Error: --prefix is required for target 'ssm'", file=sys.stderr)
        print("\nUse '/' to read every parameter, or a path such as '/app/'.", file=sys.stderr)
        sys.exit(2)

    if not prefix.startswith("/"):
        print(f"Error: Invalid prefix '{prefix}' for target 'ssm'", file=sys.stderr)
        print("\nParameter Store paths must start with '/'.", file=sys.stderr)
        print("\nExamples of valid prefixes:", file=sys.stderr)
        print("  ✓ /", file=sys.stderr)
        print("  ✓ /app/", file=sys.stderr)
        print("  ✓ /prod/db", file=sys.stderr)
        sys.exit(2)
