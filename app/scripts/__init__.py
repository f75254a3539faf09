# Operational entry points, run with python -m app.scripts.<name>
