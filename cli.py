#!/usr/bin/env python3
"""
LoanLens CLI - Command Line Interface
=====================================

Commands:
  loanlens analyze <file>                  Analyze a loan agreement
  loanlens compare <file> <file> ...       Compare two to ten agreements
  loanlens compliance <file> [metrics]     Check covenants against actual metrics
  loanlens demo                            Analyze the bundled demo agreement

Analyses live in an in-memory store for the duration of one command.
"""

import sys
import os
import argparse
import json
import logging
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from rich.console import Console
from rich.table import Table
from rich import box
from rich.markup import escape

from agents.loan_analysis import (
    DEMO_DOCUMENT_NAME,
    DEMO_FACILITY_AGREEMENT,
    CheckSeverity,
    CovenantComplianceEvaluator,
    LoanAnalysis,
    LoanAnalysisError,
    LoanComparator,
    Severity,
    create_pipeline,
)
from core.logging_config import setup_logging
from storage import InMemoryAnalysisStore

logger = logging.getLogger(__name__)

SEVERITY_STYLES = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "white",
    CheckSeverity.CRITICAL: "red",
    CheckSeverity.WARNING: "yellow",
    CheckSeverity.HEALTHY: "green",
}


def get_console():
    """Get Rich console"""
    return Console()


def print_output(message, style=None):
    """Print output with optional styling"""
    console = get_console()
    if style:
        console.print(escape(str(message)), style=style)
    else:
        console.print(escape(str(message)))


def print_json(data):
    """Emit machine-readable output without Rich markup"""
    print(json.dumps(data, indent=2, default=str))


def read_document(path):
    """Read an agreement as UTF-8 text"""
    return Path(path).read_text(encoding="utf-8")


def _or_na(value):
    if value is None:
        return "N/A"
    return escape(value.value if hasattr(value, "value") else str(value))


def render_analysis(analysis: LoanAnalysis):
    """Print one analysis as a set of tables"""
    console = get_console()
    terms = analysis.financial_terms

    table = Table(title=f"Analysis: {escape(analysis.name)}", box=box.ROUNDED)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("ID", analysis.id)
    table.add_row("Borrowers", escape(", ".join(analysis.parties.borrowers)) or "N/A")
    table.add_row("Lenders", escape(", ".join(analysis.parties.lenders)) or "N/A")
    table.add_row("Agents", escape(", ".join(analysis.parties.agents)) or "N/A")
    if analysis.parties.guarantors:
        table.add_row("Guarantors", escape(", ".join(analysis.parties.guarantors)))
    table.add_row("Principal", _or_na(terms.principal_amount))
    table.add_row("Currency", _or_na(terms.currency))
    table.add_row("Interest Rate", _or_na(terms.interest_rate))
    table.add_row("Margin", _or_na(terms.margin))
    table.add_row("Reference Rate", _or_na(terms.reference_rate))
    table.add_row("Facility Type", _or_na(terms.facility_type))
    table.add_row(
        "Covenants",
        f"{len(analysis.covenants.financial)} financial, "
        f"{len(analysis.covenants.informational)} informational, "
        f"{len(analysis.covenants.negative)} negative",
    )
    table.add_row("ESG Provisions", "Yes" if analysis.esg_clauses.has_esg_provisions else "No")

    console.print(table)

    if analysis.key_dates:
        dates = Table(title="Key Dates", box=box.ROUNDED)
        dates.add_column("Type", style="cyan")
        dates.add_column("Date", style="white")
        for key_date in analysis.key_dates:
            dates.add_row(key_date.type, key_date.date)
        console.print(dates)

    if analysis.risk_flags:
        risks = Table(title="Risk Flags", box=box.ROUNDED)
        risks.add_column("Type", style="cyan")
        risks.add_column("Severity")
        risks.add_column("Description", style="white")
        for flag in analysis.risk_flags:
            style = SEVERITY_STYLES.get(flag.severity, "white")
            risks.add_row(flag.type, f"[{style}]{flag.severity.value}[/{style}]", flag.description)
        console.print(risks)

    for obligation in analysis.obligations:
        print_output(f"  • {obligation.type} ({obligation.deadline}): {obligation.description[:80]}")


def cmd_analyze(args):
    """Analyze a loan agreement"""
    text = read_document(args.file)
    pipeline = create_pipeline()
    analysis = pipeline.analyze(text, name=args.name or Path(args.file).name)

    if args.json:
        print_json(analysis.to_dict())
    else:
        render_analysis(analysis)
    return 0


def cmd_compare(args):
    """Compare several loan agreements"""
    store = InMemoryAnalysisStore()
    pipeline = create_pipeline()

    ids = []
    for path in args.files:
        analysis = pipeline.analyze_and_store(read_document(path), store, name=Path(path).name)
        ids.append(analysis.id)

    comparison = LoanComparator(store).compare(ids)

    if args.json:
        print_json(comparison.to_dict())
        return 0

    console = get_console()
    table = Table(title="Loan Comparison", box=box.ROUNDED)
    table.add_column("Loan", style="cyan")
    table.add_column("Principal", style="white")
    table.add_column("Currency", style="white")
    table.add_column("Reference Rate", style="white")
    table.add_column("Covenants", style="yellow")
    table.add_column("ESG", style="green")

    for loan, terms, counts, esg in zip(
        comparison.loans,
        comparison.financial_terms,
        comparison.covenant_counts,
        comparison.esg_comparison,
    ):
        table.add_row(
            escape(loan["name"][:40]),
            _or_na(terms.principal_amount),
            _or_na(terms.currency),
            _or_na(terms.reference_rate),
            str(sum(counts.values())),
            "Yes" if esg.has_esg_provisions else "No",
        )
    console.print(table)

    if not comparison.has_inconsistencies:
        print_output("✓ No inconsistencies detected", "green")
        return 0

    print_output(f"\n⚠ {len(comparison.inconsistencies)} inconsistencies:", "yellow")
    for issue in comparison.inconsistencies:
        style = SEVERITY_STYLES.get(issue.severity, "white")
        print_output(f"  • ({issue.severity.value}) {issue.type}: {issue.description}", style)
        print_output(f"      Affected: {', '.join(issue.affected_loans)}")
    return 0


def cmd_compliance(args):
    """Check financial covenants against actual metrics"""
    store = InMemoryAnalysisStore()
    analysis = create_pipeline().analyze_and_store(
        read_document(args.file), store, name=Path(args.file).name
    )

    metrics = {
        "leverageRatio": args.leverage_ratio,
        "interestCoverageRatio": args.interest_coverage_ratio,
        "netWorth": args.net_worth,
    }
    result = CovenantComplianceEvaluator(store).evaluate(analysis.id, metrics)

    if args.json:
        print_json(result.to_dict())
        return 0

    if not result.details:
        print_output("No testable covenants for the metrics supplied.", "yellow")
        return 0

    console = get_console()
    table = Table(title=f"Covenant Compliance: {escape(analysis.name)}", box=box.ROUNDED)
    table.add_column("Covenant", style="cyan")
    table.add_column("Threshold", style="white")
    table.add_column("Actual", style="white")
    table.add_column("Buffer", style="white")
    table.add_column("Status")

    for check in result.details:
        style = SEVERITY_STYLES.get(check.severity, "white")
        table.add_row(
            check.covenant,
            check.threshold,
            check.actual,
            check.buffer,
            f"[{style}]{check.status.value} ({check.severity.value})[/{style}]",
        )
    console.print(table)

    summary = result.summary
    overall_style = {"compliant": "green", "warning": "yellow", "breach": "red"}[summary.overall_status.value]
    print_output(
        f"Overall: {summary.overall_status.value.upper()} "
        f"({summary.breaches} breaches, {summary.warnings} warnings, {summary.healthy} healthy)",
        overall_style,
    )
    return 0


def cmd_demo(args):
    """Analyze the bundled demo agreement"""
    analysis = create_pipeline().analyze(DEMO_FACILITY_AGREEMENT, name=DEMO_DOCUMENT_NAME)

    if args.json:
        print_json(analysis.to_dict())
    else:
        render_analysis(analysis)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="loanlens",
        description="LoanLens - Loan agreement analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  loanlens analyze ./facility_agreement.txt
  loanlens compare ./loan_a.txt ./loan_b.txt
  loanlens compliance ./facility_agreement.txt --leverage-ratio 3.2 --net-worth 150000000
  loanlens demo --json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze a loan agreement")
    analyze_parser.add_argument("file", help="Path to agreement text (UTF-8)")
    analyze_parser.add_argument("--name", "-n", help="Display name for the document")
    analyze_parser.add_argument("--json", action="store_true", help="Print JSON")

    # compare command
    compare_parser = subparsers.add_parser("compare", help="Compare loan agreements")
    compare_parser.add_argument("files", nargs="+", help="Paths to agreement texts")
    compare_parser.add_argument("--json", action="store_true", help="Print JSON")

    # compliance command
    compliance_parser = subparsers.add_parser("compliance", help="Check covenant compliance")
    compliance_parser.add_argument("file", help="Path to agreement text (UTF-8)")
    compliance_parser.add_argument("--leverage-ratio", help="Actual leverage ratio (e.g. 3.2)")
    compliance_parser.add_argument("--interest-coverage-ratio", help="Actual interest coverage ratio")
    compliance_parser.add_argument("--net-worth", help="Actual net worth in currency units")
    compliance_parser.add_argument("--json", action="store_true", help="Print JSON")

    # demo command
    demo_parser = subparsers.add_parser("demo", help="Analyze the demo agreement")
    demo_parser.add_argument("--json", action="store_true", help="Print JSON")

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 2

    setup_logging()

    # Route to command handler
    commands = {
        "analyze": cmd_analyze,
        "compare": cmd_compare,
        "compliance": cmd_compliance,
        "demo": cmd_demo,
    }

    handler = commands[args.command]
    try:
        return handler(args)
    except LoanAnalysisError as e:
        logger.warning(f"Rejected: {e}", extra={"command": args.command})
        print_output(f"Error: {e}", "red")
        return 1
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Could not read input: {e}", extra={"command": args.command})
        print_output(f"Error: {e}", "red")
        return 1


if __name__ == "__main__":
    sys.exit(main())
