#!/usr/bin/env python3
"""
Quick Start Guide for the XML Bracket Notation converter.

This example walks through converting a document in memory, converting a
file on disk, and comparing two bracket notation files.
"""

import sys
import tempfile
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from xml_bracket import (
    BracketTransducer,
    ConverterConfig,
    XMLEventReader,
    XMLParseError,
    compare_files,
    convert_file,
    convert_string,
)
from xml_bracket.compare import format_mismatch

SAMPLE_XML = """<?xml version="1.0"?>
<catalog>
  <book id="123" genre="fiction">
    <title>My Book</title>
    <price currency="USD">19.99</price>
  </book>
  <book id="456">
    <title>Braces {and} backslashes \\ escaped</title>
  </book>
</catalog>
"""


def quick_start_example():
    """Quick start example showing basic usage."""

    print("🚀 QUICK START - XML Bracket Notation")
    print("=" * 40)

    # Step 1: Convert a string
    print("\n📄 Step 1: In-memory conversion")
    print("-" * 30)

    for line in convert_string(SAMPLE_XML).splitlines():
        print(f"  {line}")

    # Step 2: Walk the event stream
    print("\n🔍 Step 2: Structural events")
    print("-" * 30)

    reader = XMLEventReader()
    for event in list(reader.iter_string("<root><a k='v'>t</a></root>")):
        print(f"  {event.type.name:<14} {event.name or event.text}")

    # Step 3: Convert a file on disk
    print("\n⚡ Step 3: File conversion")
    print("-" * 30)

    with tempfile.TemporaryDirectory() as workdir:
        xml_path = Path(workdir) / "catalog.xml"
        xml_path.write_text(SAMPLE_XML, encoding="utf-8")

        config = ConverterConfig(progress_interval=1)
        result = convert_file(
            xml_path,
            output_dir=workdir,
            config=config,
            progress_callback=lambda records: print(f"  ... {records} trees parsed"),
        )
        print(f"✅ Wrote {result.records} records to {result.output_path.name}")
        print(f"📏 Maximum depth: {result.max_depth}")
        print(f"⏱️  Time: {result.performance.processing_time_ms:.2f}ms")

        # Step 4: Compare against an edited copy
        print("\n🔁 Step 4: Comparison")
        print("-" * 30)

        edited = Path(workdir) / "edited.bracket"
        lines = result.output_path.read_text(encoding="utf-8").splitlines()
        lines[1] = lines[1].replace("456", "789")
        edited.write_text("\n".join(lines) + "\n", encoding="utf-8")

        comparison = compare_files(result.output_path, edited)
        if comparison.identical:
            print("✅ Files are identical")
        else:
            print(f"⚠️  {format_mismatch(comparison.mismatch)}")

    # Step 5: Error handling
    print("\n🛡️  Step 5: Malformed input")
    print("-" * 30)

    try:
        BracketTransducer(progress_callback=lambda records: None).convert_string(
            "<root><a></b></root>"
        )
    except XMLParseError as e:
        print(f"❌ {e}")

    print("\n🎉 Quick start complete!")


if __name__ == "__main__":
    quick_start_example()
