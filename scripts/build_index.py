import argparse
import logging
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from skos_indexer.config import settings
from skos_indexer.index.rebuild import rebuild_index
from skos_indexer.thesaurus.loader import ThesaurusLoadError, load_thesaurus


def parse_args():
    parser = argparse.ArgumentParser(description="Rebuild a SKOS concept index.")
    parser.add_argument("thesaurus", nargs="?", default=settings.thesaurus_path,
                        help="JSON thesaurus file (default: THESAURUS_PATH)")
    parser.add_argument("--index-dir", default=settings.index_dir,
                        help="Index directory; its contents are replaced")
    parser.add_argument("--languages", default=settings.index_languages,
                        help="Comma-separated language codes; empty means all supported")
    parser.add_argument("--no-transitive", action="store_true",
                        help="Do not index transitive collection membership")
    parser.add_argument("--quiet", action="store_true",
                        help="Report progress at debug level only")
    return parser.parse_args()


def main():
    args = parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.thesaurus:
        print("No thesaurus file given (argument or THESAURUS_PATH).")
        return 2

    try:
        thesaurus = load_thesaurus(args.thesaurus)
    except ThesaurusLoadError as e:
        print(f"Error loading thesaurus: {e}")
        return 2

    languages = [code for code in args.languages.split(",") if code.strip()]

    with thesaurus.list_concepts() as cursor:
        result = rebuild_index(
            cursor,
            args.index_dir,
            languages=languages,
            transitive_collections=not args.no_transitive,
            verbose=not args.quiet,
        )

    print(result.summary())
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
