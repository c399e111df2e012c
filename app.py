from flask import (
    Flask,
    render_template,
    jsonify,
    request,
    g,
    abort,
    Response,
)
import os

from commits import (
    DEFAULT_TIMEZONE,
    EmptyDatasetError,
    ParseError,
    load_records,
    process_commits,
    selection_stats,
    summary_stats,
)
from chart import Layout, build_chart, selected_commits
from scales import Selection


app = Flask(__name__)
app.config["DEBUG"] = True
app.config.update(
    LOC_CSV_PATH=os.environ.get("LOC_CSV_PATH", "meta/loc.csv"),
    COMMIT_URL_BASE=os.environ.get("COMMIT_URL_BASE", ""),
    DEFAULT_TIMEZONE=os.environ.get("DEFAULT_TIMEZONE", DEFAULT_TIMEZONE),
    CHART_WIDTH=int(os.environ.get("CHART_WIDTH", 1000)),
    CHART_HEIGHT=int(os.environ.get("CHART_HEIGHT", 600)),
)


@app.route("/")
def index():
    if g.load_error is not None:
        message, status = g.load_error
        return render_template("index.html", error=message), status
    commits = get_commits()
    if not commits:
        return render_template("index.html", error="No data to display.")
    return render_template(
        "index.html",
        stats=summary_stats(g.dataset, commits),
        chart=get_chart(commits),
        error=None,
    )


@app.route("/svg")
def serve_svg():
    commits = get_commits()
    if not commits:
        return "Graph is empty!", 404
    selection = selection_from_args(request.args)
    chart = get_chart(commits, selection=selection)
    svg = render_template("chart.svg", chart=chart, standalone=True)
    return Response(svg, mimetype="image/svg+xml")


@app.route("/stats")
def serve_stats():
    commits = get_commits()
    try:
        stats = summary_stats(g.dataset, commits)
    except EmptyDatasetError:
        return jsonify({"error": "no data"}), 404
    return jsonify(stats.to_dict())


@app.route("/selection", methods=["POST"])
def select_commits():
    commits = get_commits()
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        abort(400, "expected a JSON body with x0, y0, x1, y1")
    selection = selection_from_args(body)
    if selection is None:
        abort(400, "expected a JSON body with x0, y0, x1, y1")
    if not commits:
        return jsonify({"ids": [], **selection_stats([])})
    chart = get_chart(commits)
    selected = selected_commits(commits, chart, selection)
    return jsonify({"ids": [c.id for c in selected], **selection_stats(selected)})


def get_commits():
    if g.dataset is None:
        message, status = g.load_error
        abort(status, message)
    return process_commits(
        g.dataset.records, commit_url_base=app.config["COMMIT_URL_BASE"]
    )


def get_chart(commits, selection=None):
    layout = Layout(
        width=app.config["CHART_WIDTH"], height=app.config["CHART_HEIGHT"]
    )
    return build_chart(commits, layout=layout, selection=selection)


def selection_from_args(args):
    keys = ("x0", "y0", "x1", "y1")
    if not any(k in args for k in keys):
        return None
    try:
        x0, y0, x1, y1 = (float(args[k]) for k in keys)
        return Selection.from_corners([(x0, y0), (x1, y1)])
    except (KeyError, TypeError, ValueError):
        abort(400, "selection needs numeric x0, y0, x1, y1")


@app.before_request
def before():
    if request.endpoint == "static":
        return
    g.dataset = None
    g.load_error = None
    path = app.config["LOC_CSV_PATH"]
    try:
        g.dataset = load_records(
            path, default_timezone=app.config["DEFAULT_TIMEZONE"]
        )
    except FileNotFoundError:
        app.logger.error("loc data not found: %s", path)
        g.load_error = (f"Sorry, there's no data file at {path}.", 404)
    except ParseError as e:
        app.logger.error("could not parse %s: %s", path, e)
        g.load_error = (f"Sorry, {path} could not be read: {e}", 400)


if __name__ == "__main__":
    app.run(port=5001)
