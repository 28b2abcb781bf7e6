from pathlib import Path
import argparse

from markoreader.rendering.terminal_renderer import STYLES, render
from markoreader.rendering.terminal_utils import terminal_width


SAMPLE = """# Markdown Preview

Some *emphasis*, some **bold**, and `inline code` :sparkles:

- [x] task lists
- ~~strikethrough~~

| Style | Colors |
| ----- | ------ |
| dark  | yes    |
| notty | no     |

```python
def hello():
    return "world"
```
"""


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Preview a Markdown file in every terminal style."
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Path to a Markdown file. Defaults to a built-in sample.",
    )
    parser.add_argument(
        "--style",
        choices=sorted(STYLES),
        default=None,
        help="Only render this style.",
    )
    args = parser.parse_args()

    if args.path:
        markdown_path = Path(args.path)
        if not markdown_path.exists():
            raise SystemExit(f"File not found: {markdown_path}")
        markdown_text = markdown_path.read_text(encoding="utf-8")
    else:
        markdown_text = SAMPLE

    names = [args.style] if args.style else sorted(STYLES)
    width = terminal_width()
    for name in names:
        print(f"--- {name} ---")
        print(render(markdown_text, width, STYLES[name]))


if __name__ == "__main__":
    main()
