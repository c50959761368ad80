from __future__ import annotations

import argparse
import json
import os
import sys
from datetime import datetime
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def _load_json(path: Path):
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


def _load_data(path: Path):
    """JSON, or YAML when the suffix says so."""
    if path.suffix.lower() in (".yaml", ".yml"):
        try:
            import yaml  # type: ignore
        except ModuleNotFoundError as exc:
            raise SystemExit("PyYAML is required for YAML input. Install it with `pip install pyyaml`.") from exc
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    return _load_json(path)


def run_validation_report(
    *,
    rules_path: Path | None,
    model_path: Path | None,
    validation_path: Path | None,
    message_path: Path | None,
    output_dir: Path,
    title: str | None = None,
    now: datetime | None = None,
) -> list[Path]:
    """Evaluate (or load) validation logs and write the JSON payload and HTML report."""
    _ensure_backend_on_path()
    from common.report.builder import build_report
    from common.report.normalize import read_validation_payload
    from common.report.render import render_html
    from common.rules_engine.config import get_settings
    from common.rules_engine.context import EvaluationContext, TabularModel
    from common.rules_engine.loader import load_rules_file
    from common.rules_engine.runner import RulesRunner

    settings = get_settings()
    rules = load_rules_file(rules_path) if rules_path else []

    if model_path is not None:
        message = _load_data(message_path) if message_path else {}
        if not isinstance(message, dict):
            raise SystemExit("--message must contain a JSON/YAML object.")
        ctx = EvaluationContext(
            model=TabularModel.from_mapping(_load_data(model_path)),
            message=message,
            env=dict(os.environ),
            config=settings.evaluator_config(),
        )
        result = RulesRunner(rules).run(ctx)
    else:
        result = read_validation_payload(_load_data(validation_path))
        if result is None:
            raise SystemExit(f"No validation found in {validation_path}.")

    report_config = settings.report_config()
    if title:
        report_config = report_config.model_copy(update={"title": title})

    generated_at = now or datetime.now()
    stamp = generated_at.strftime("%Y%m%d_%H%M%S")
    output_dir.mkdir(parents=True, exist_ok=True)
    out_json = output_dir / f"validation_{stamp}.json"
    out_html = output_dir / f"validation_report_{stamp}.html"

    document = build_report(result, rules, config=report_config, generated_at=generated_at)
    out_json.write_text(json.dumps(result.to_wire(), indent=2), encoding="utf-8")
    out_html.write_text(render_html(document), encoding="utf-8")
    return [out_json, out_html]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Validate a tabular model against a ruleset and write an interactive HTML report."
    )
    parser.add_argument("--rules", default=None, help="Ruleset file (JSON or YAML).")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--model", default=None, help="Parsed workbook (JSON or YAML) to validate.")
    source.add_argument(
        "--validation",
        default=None,
        help="Existing validation payload ({logs, counts} or a list of log entries) to render.",
    )
    parser.add_argument(
        "--message",
        default=None,
        help="Message object used to resolve rule conditions (JSON or YAML).",
    )
    parser.add_argument("--output-dir", default=".", help="Output directory for report files.")
    parser.add_argument("--title", default=None, help="Report title (defaults to VALIDATION_REPORT_TITLE).")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (defaults to VALIDATION_REPORT_LOG_LEVEL or INFO).",
    )
    args = parser.parse_args(argv)

    if args.model and not args.rules:
        raise SystemExit("--model requires --rules.")

    _ensure_backend_on_path()
    from common.loggy import setup_logging
    from common.rules_engine.config import get_settings
    from common.rules_engine.errors import ConfigurationError

    setup_logging(args.log_level or get_settings().log_level)

    try:
        written = run_validation_report(
            rules_path=Path(args.rules).resolve() if args.rules else None,
            model_path=Path(args.model).resolve() if args.model else None,
            validation_path=Path(args.validation).resolve() if args.validation else None,
            message_path=Path(args.message).resolve() if args.message else None,
            output_dir=Path(args.output_dir).resolve(),
            title=args.title,
        )
    except ConfigurationError as exc:
        raise SystemExit(f"Invalid ruleset: {exc}") from exc

    for path in written:
        print(f"Wrote {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
