import argparse
from datetime import datetime, timezone
from pathlib import Path

from api.services.documents import ReportMetadata
from api.services.report_assembler import assemble_report


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a report text file into PDF and DOCX documents.")
    parser.add_argument("report", type=Path, help="UTF-8 text file holding the generated report")
    parser.add_argument("out_dir", type=Path, help="directory that receives report.pdf and report.docx")
    parser.add_argument("--name", default=None, help="recipient shown on the 'Prepared for' line")
    parser.add_argument("--question", default="", help="question printed above the report body")
    parser.add_argument("--item-count", type=int, default=0, help="knowledge base size quoted in the footer")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    text = args.report.read_text(encoding="utf-8")
    rendered = assemble_report(
        text,
        ReportMetadata(
            question=args.question,
            generated_at=datetime.now(timezone.utc),
            recipient_name=args.name,
            item_count=args.item_count,
        ),
    )
    args.out_dir.mkdir(parents=True, exist_ok=True)
    pdf_path = args.out_dir / "report.pdf"
    docx_path = args.out_dir / "report.docx"
    pdf_path.write_bytes(rendered.pdf.content)
    docx_path.write_bytes(rendered.docx.content)
    print(f"Wrote {pdf_path}")
    print(f"Wrote {docx_path}")


if __name__ == "__main__":
    main()
