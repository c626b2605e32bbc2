"""FastMCP server implementation for filesense."""

from mcp.server.fastmcp import FastMCP

from filesense.magika import Magika
from filesense.models import MagikaResult


def _format_result(result: MagikaResult) -> str:
    out = result.output
    line = f"{result.path}: {out.ct_label} ({out.group}, {out.mime_type}) score={out.score:.3f}"
    if result.dl.ct_label and result.dl.ct_label != out.ct_label:
        line += f" [model best-guess: {result.dl.ct_label}, score={result.dl.score:.3f}]"
    return line


def create_mcp_server(magika: Magika) -> FastMCP:
    """Create an MCP server backed by a loaded Magika instance.

    The model is loaded once and shared by every tool call. The caller owns
    the instance and closes it when the server stops.

    Args:
        magika: Pipeline used to answer identification requests

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP(
        name="filesense",
    )

    @mcp.tool()
    def identify(path: str) -> str:
        """Identify the content type of a file on the server's filesystem.

        Args:
            path: Path to the file

        Returns:
            Label, group, MIME type and score of the detected content type
        """
        return _format_result(magika.identify_path(path))

    @mcp.tool()
    def identify_many(paths: list[str]) -> str:
        """Identify the content types of several files in one batch.

        Args:
            paths: Paths to the files

        Returns:
            One line per path, in the order the paths were given
        """
        if not paths:
            return "No paths given"
        return "\n".join(_format_result(r) for r in magika.identify_paths(paths))

    @mcp.tool()
    def list_content_types() -> str:
        """List the content types the model can return.

        Returns:
            One line per content type with its group and description
        """
        lines = []
        for ct in magika.content_types.get_output_content_types():
            lines.append(f"{ct.name:<20} {ct.group or 'unknown':<12} {ct.description or ''}")
        return "\n".join(lines)

    return mcp
