import asyncio
import logging
import sys
from pathlib import Path

from dentaku.dentaku_config import load_config
from dentaku.dentaku_datatypes import ConfigurationError
from dentaku.dentaku_runtime import LineRunner

# A basic awaitable input prompt.
async def ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return await loop.run_in_executor(None, sys.stdin.readline)

def print_side_effects(result):
    for effect in result.side_effects:
        if effect.get('topics') == ['stderr'] and result.status != 'error':
            print(effect.get('message', ''), file=sys.stderr)

def make_runner() -> LineRunner:
    try:
        config = load_config()
        logging.basicConfig(level=config.log_level)
        return LineRunner(config)
    except ConfigurationError as e:
        print(f"ConfigurationError: {e}", file=sys.stderr)
        raise SystemExit(1)

def run_script_file(file_path: str):
    """Run a dentaku script file non-interactively and exit with appropriate status."""
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    runner = make_runner()
    for result in runner.handle_script(source):
        if result.status == 'error':
            print(result.format_error(), file=sys.stderr)
            raise SystemExit(1)
        print(result.text)
        print_side_effects(result)

async def main():
    """Run a script file when provided, otherwise start the interactive REPL."""
    if len(sys.argv) > 1:
        arg = sys.argv[1]
        # Treat argv[1] as a script file when it's not a flag; run_script_file handles missing files
        if not arg.startswith("-"):
            run_script_file(arg)
            return

    print("dentaku REPL v0.1")
    print("Type 'exit' or press Ctrl+D to quit.")

    # Setup
    runner = make_runner()

    # REPL Loop
    while True:
        try:
            raw = await ainput(">> ")
            if raw == "":
                raise EOFError
            line = raw.strip()

            if not line:
                continue
            if line == "exit":
                break

            result = runner.handle_line(line)

            if result.status == 'error':
                print(result.format_error(), file=sys.stderr)
                continue

            print(result.text)
            # Warnings about unparsed input follow the value
            print_side_effects(result)

        except EOFError:
            print("\nExiting.")
            break
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nExiting.")
