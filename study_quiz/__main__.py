"""CLI entry point for study-quiz.

Usage:
  python -m study_quiz serve [--port PORT] [--host HOST]
  python -m study_quiz stop
  python -m study_quiz restart [--port PORT]
  python -m study_quiz status
  python -m study_quiz generate FILE [--type TYPE[,TYPE...]] [--count N] [--offline] [--json]
  python -m study_quiz validate FILE.json
"""
from __future__ import annotations

import asyncio
import json
import os
import signal
import sys
import time
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"
VALUED_FLAGS = {"--type", "--count", "--port", "--host"}


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"
    handler = COMMANDS.get(command)
    if handler is None:
        print(f"Unknown command: {command}")
        print(f"Commands: {', '.join(COMMANDS)}")
        sys.exit(1)
    handler(args[1:])


def _parse_flag(args: list[str], name: str, default: str) -> str:
    if name in args:
        i = args.index(name)
        if i + 1 < len(args):
            return args[i + 1]
    return default


def _positional(args: list[str]) -> list[str]:
    """Arguments that are neither flags nor flag values."""
    result = []
    previous = ""
    for a in args:
        if not a.startswith("--") and previous not in VALUED_FLAGS:
            result.append(a)
        previous = a
    return result


def _server_pid() -> int | None:
    """PID of the running server; a stale PID file is removed."""
    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
    except FileNotFoundError:
        return None
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None
    return pid


def _stop(args: list[str] | None = None) -> bool:
    pid = _server_pid()
    if pid is None:
        print("Server is not running.")
        return False
    PID_FILE.unlink(missing_ok=True)
    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        print("Server exited before it could be stopped.")
        return False
    print(f"Stopped server (PID {pid}).")
    return True


def _status(args: list[str] | None = None):
    pid = _server_pid()
    print("Server is not running." if pid is None else f"Server is running (PID {pid}).")


def _restart(args: list[str]):
    if _stop():
        time.sleep(1)
    _serve(args)


def _serve(args: list[str]):
    import uvicorn

    running = _server_pid()
    if running is not None:
        print(f"Server already running (PID {running}). Use 'restart' or 'stop' first.")
        sys.exit(1)

    host = _parse_flag(args, "--host", "127.0.0.1")
    port = int(_parse_flag(args, "--port", "8765"))
    PID_FILE.write_text(str(os.getpid()))
    print(f"Serving Study Quiz at http://{host}:{port} (Ctrl+C to stop)")
    try:
        uvicorn.run("study_quiz.app:app", host=host, port=port, timeout_graceful_shutdown=5)
    finally:
        PID_FILE.unlink(missing_ok=True)


def _format_quiz(n: int, quiz) -> str:
    d = quiz.to_dict()
    lines = [f"{n}. [{d['type']}] {d['question']}"]
    if d["type"] == "multiple_choice":
        for label, opt in zip("ABCDEFGH", d["options"]):
            lines.append(f"     {label}) {opt}")
    elif d["type"] == "matching":
        for i, p in enumerate(d["pairs"], 1):
            lines.append(f"     {p['left']:<30} {i}) {p['right']}")
    elif d["type"] == "true_false":
        lines.append(f"     underlined: {d['underlinedText']}")
    answer = d["correct_answer"]
    if isinstance(answer, list):
        answer = ", ".join(answer)
    if d["type"] == "true_false" and d["correct_answer"] == "False":
        answer += f" (replace with: {d['correctReplacement']})"
    lines.append(f"   Answer: {answer}")
    lines.append(f"   {d['explanation']}")
    return "\n".join(lines)


def _generate(args: list[str]):
    from study_quiz.ai_generator import create_generator
    from study_quiz.config import load_settings
    from study_quiz.parsers.material_parser import MaterialError, parse_material_file
    from study_quiz.question_generator import generate_quizzes

    files = _positional(args)
    if not files:
        print("Usage: python -m study_quiz generate FILE [--type TYPE] [--count N] [--offline] [--json]")
        sys.exit(1)

    settings = load_settings()
    count = int(_parse_flag(args, "--count", str(settings.default_question_count)))
    type_arg = _parse_flag(args, "--type", "mixed")
    selection = type_arg.split(",") if "," in type_arg else type_arg
    as_json = "--json" in args

    try:
        material = parse_material_file(Path(files[0]))
    except MaterialError as e:
        print(f"Cannot read study material: {e}")
        sys.exit(1)

    generator = None
    if "--offline" not in args:
        try:
            generator = create_generator(settings)
        except ValueError as e:
            print(f"{e}; generating offline")

    if not as_json:
        source = generator.name() if generator else "offline synthesis"
        print(f"Generating {count} questions from {material.source_file} "
              f"({material.word_count} words) using {source}...")

    result = asyncio.run(generate_quizzes(
        material.text, selection, count,
        generator=generator,
        top_up=settings.fallback_top_up,
    ))

    if as_json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    print()
    for n, quiz in enumerate(result.quizzes, 1):
        print(_format_quiz(n, quiz))
        print()
    print(f"Delivered {result.achieved} of {result.requested} ({result.source})")
    if result.shortfall:
        print(f"Short by {result.shortfall}: the material did not yield enough unique questions.")


def _validate(args: list[str]):
    from study_quiz.validation import quiz_problems

    files = _positional(args)
    if not files:
        print("Usage: python -m study_quiz validate FILE.json")
        sys.exit(1)

    data = json.loads(Path(files[0]).read_text())
    quizzes = data.get("quizzes", []) if isinstance(data, dict) else data
    invalid = 0
    for n, quiz in enumerate(quizzes, 1):
        problems = quiz_problems(quiz) if isinstance(quiz, dict) else ["not a JSON object"]
        if problems:
            invalid += 1
            print(f"  [{n}] INVALID: {'; '.join(problems)}")
        else:
            print(f"  [{n}] OK   {quiz.get('type')}")
    print(f"\n{len(quizzes) - invalid}/{len(quizzes)} valid")
    if invalid:
        sys.exit(1)


COMMANDS = {
    "serve": _serve,
    "stop": _stop,
    "restart": _restart,
    "status": _status,
    "generate": _generate,
    "validate": _validate,
}


if __name__ == "__main__":
    main()
