import pytest

from app import app as flask_app


HEADER = "commit,author,date,time,timezone,file,line,depth,length,datetime"


def row(commit, file="main.js", line=1, depth=0, length=10,
        date="2024-10-01", time="09:30", timezone="+09:00", author="Sam"):
    stamp = f"{date}T{time}:00{timezone}"
    return f"{commit},{author},{date},{time},{timezone},{file},{line},{depth},{length},{stamp}"


def csv_text(*rows):
    return "\n".join([HEADER, *rows]) + "\n"


@pytest.fixture
def loc_csv(tmp_path):
    path = tmp_path / "loc.csv"

    def write(*rows):
        path.write_text(csv_text(*rows), encoding="utf-8")
        return path

    return write


@pytest.fixture
def app(tmp_path):
    flask_app.config.update(
        TESTING=True,
        LOC_CSV_PATH=str(tmp_path / "loc.csv"),
        COMMIT_URL_BASE="https://example.com/commit/",
        CHART_WIDTH=800,
        CHART_HEIGHT=400,
    )
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()
