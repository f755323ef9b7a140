import logging

from flask import Flask, request, render_template_string

from cold_storage_dashboard.db import open_conn
from cold_storage_dashboard.feature_flags import resolve_schema
from cold_storage_dashboard.summary import FilterCriteria, get_schema, load_dashboard

app = Flask(__name__)
logger = logging.getLogger("csd.web")

HTML = """
<!doctype html>
<title>Cold Storage Dashboard</title>
<h2>Cold Storage Facilities</h2>
<form method="get">
  <select name="state">
    <option value="">All states</option>
    {% for s in states %}
    <option value="{{s}}" {% if s == selected.state %}selected{% endif %}>{{s}}</option>
    {% endfor %}
  </select>
  <select name="city" style="margin-left:8px">
    <option value="">All cities</option>
    {% for c in cities %}
    <option value="{{c}}" {% if c == selected.city %}selected{% endif %}>{{c}}</option>
    {% endfor %}
  </select>
  <input type="date" name="start_date" style="margin-left:8px" value="{{selected.start_date|default('', true)}}" />
  <input type="date" name="end_date" style="margin-left:8px" value="{{selected.end_date|default('', true)}}" />
  <button type="submit" style="margin-left:8px">Filter</button>
</form>
{% if error %}
<p class="error" style="color:#b00">{{error}}</p>
{% endif %}
<p>{{records|length}} facilities</p>
<table border="1" cellpadding="4" style="border-collapse:collapse; margin-top:8px">
  <tr>{% for name in columns %}<th>{{name}}</th>{% endfor %}</tr>
  {% for row in records %}
  <tr>{% for name in columns %}<td>{{row[name]}}</td>{% endfor %}</tr>
  {% endfor %}
</table>
"""


@app.route("/", methods=["GET"])
def home():
    schema = get_schema(resolve_schema())
    columns = [spec.name for spec in schema.fields]
    try:
        criteria = FilterCriteria.from_params(
            state=request.args.get("state"),
            city=request.args.get("city"),
            start_date=request.args.get("start_date"),
            end_date=request.args.get("end_date"),
        )
    except ValueError as exc:
        logger.info("rejected filters: %s", exc)
        html = render_template_string(
            HTML,
            states=[],
            cities=[],
            selected=FilterCriteria().to_dict(),
            records=[],
            columns=columns,
            error=str(exc),
        )
        return html, 400

    with open_conn() as conn:
        result = load_dashboard(conn, criteria, schema)

    return render_template_string(
        HTML,
        states=result.facets.states,
        cities=result.facets.cities,
        selected=criteria.to_dict(),
        records=[r.to_dict() for r in result.records],
        columns=columns,
        error=None,
    )


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5000)
