## prayog — CLI integration tests

import os, sys
import subprocess
from pathlib import Path


def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def run_cli(*cli_args: str | Path, stdin: str | None = None, env: dict | None = None) -> subprocess.CompletedProcess:
    args = [sys.executable, "-m", "prayog", "--plain"]
    args.extend(str(arg) for arg in cli_args)
    merged_env = os.environ.copy()
    merged_env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(repo_root() / "src"), merged_env.get("PYTHONPATH")]))
    if env:
        merged_env.update(env)
    return subprocess.run(args, input=stdin or "", capture_output=True, text=True, env=merged_env)


def _strip_output_lines(output: str) -> list[str]:
    return [line for line in output.splitlines() if line.strip()]


def test_cli_run_code_prints_values():
    result = run_cli("-c", "1 + 2", "'a' . 'b'")
    assert result.returncode == 0
    assert _strip_output_lines(result.stdout) == ["3", "'ab'"]


def test_cli_run_code_shows_output_not_void():
    result = run_cli("run-code", "echo 'hi';", "$x = 1;")
    assert result.returncode == 0
    assert result.stdout == "hi\n"


def test_cli_run_code_failure_sets_exit_status():
    result = run_cli("-c", "nope()")
    assert result.returncode != 0
    assert "Error (Error): Call to undefined function nope()" in result.stderr
    assert "\033[" not in result.stderr


def test_cli_run_file_subcommand_executes_program(tmp_path: Path):
    program = tmp_path / "hello.php"
    program.write_text('<?php\nfunction greet($who) { return "Hello, $who!"; }\necho greet("file"), PHP_EOL;\n',
                       encoding='utf-8')
    result = run_cli(program)
    assert result.returncode == 0
    assert _strip_output_lines(result.stdout) == ["Hello, file!"]


def test_cli_run_file_reports_syntax_error_with_context(tmp_path: Path):
    program = tmp_path / "broken.php"
    program.write_text("<?php\n$a = 1;\n$b = ;\n", encoding='utf-8')
    result = run_cli("run-file", program)
    assert result.returncode != 0
    assert "Error (ParseError): syntax error" in result.stderr
    assert f'File "{program}", line 3' in result.stderr


def test_cli_run_file_uncaught_exception(tmp_path: Path):
    program = tmp_path / "throws.php"
    program.write_text("<?php\necho 'before';\nthrow new LogicException('nope');\n", encoding='utf-8')
    result = run_cli(program)
    assert result.returncode != 0
    assert "Error (LogicException): nope" in result.stderr
    assert "before" not in result.stdout


def test_cli_piped_stdin_runs_as_file():
    result = run_cli(stdin="<?php\n$x = 20;\necho $x + 22;\n")
    assert result.returncode == 0
    assert _strip_output_lines(result.stdout) == ["42"]


def test_cli_repl_over_piped_input():
    result = run_cli("--welcome", "HELLO", "--repl", stdin="$x = 2;\n$x * 21\nif (true) {\n  echo 'in';\n}\nexit\n")
    assert result.returncode == 0
    assert _strip_output_lines(result.stdout) == ["HELLO", "42", "in", "Goodbye!"]


def test_cli_unknown_arguments_are_rejected():
    result = run_cli("no-such-file.php", "extra")
    assert result.returncode != 0
    assert "Unknown arguments" in result.stderr


def test_cli_verbose_logs_debug_traces_to_stderr():
    result = run_cli("-v", "--repl", stdin="1 + 1\nexit\n")
    assert result.returncode == 0
    assert "DEBUG prayog." in result.stderr
    assert "DEBUG" not in result.stdout
