"""Allow ``python -m f4st <project-name>``."""

from f4st.cli import run

run()
