"""CLI script to export every stored submission to a CSV file.
Usage: python scripts/export_submissions.py [--out PATH] [--database-url URL]
"""
import sys
import argparse
import pathlib
from typing import Optional
# Ensure `backend/` is on sys.path so `questionnaire` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from questionnaire.config import settings
from questionnaire.database import Database
from questionnaire import services
from questionnaire.utils.export import export_filename, submissions_to_csv


def main(out: Optional[str] = None, database_url: Optional[str] = None) -> pathlib.Path:
    """Read all submissions straight from the database and write them as CSV.

    Without `--out` the file is named like the admin download
    (`edustar-submissions-YYYY-MM-DD.csv`) in the current directory.
    """
    target = pathlib.Path(out) if out else pathlib.Path.cwd() / export_filename()
    with Database(database_url or settings.DATABASE_URL) as db:
        with db.session() as session:
            rows = services.SubmissionService(session).list_all()
    text = submissions_to_csv(r.model_dump(by_alias=True, mode='json') for r in rows)
    target.write_text(text, encoding='utf-8')
    print(f'Exported {len(rows)} submissions to {target}')
    return target


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--out', help='Destination CSV file')
    parser.add_argument('--database-url', help='Override DATABASE_URL')
    args = parser.parse_args()
    main(out=args.out, database_url=args.database_url)
