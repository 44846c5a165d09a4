from typing import Dict, List, Set, Optional

UPDATE_MARKER = ".update("


def export_to_dot(
    call_graph: Dict[str, List[str]], highlight_callers: Optional[Set[str]] = None
) -> str:
    """
    Exports a call graph to GraphViz DOT format.

    Args:
        call_graph: Mapping of caller -> callees.
        highlight_callers: Optional set of callers to highlight in the diagram.

    Returns:
        A string containing the DOT representation of the graph.
    """
    highlight_callers = highlight_callers or set()
    dot = ["digraph G {"]
    dot.append('  node [shape=box, style=filled, fillcolor=white, fontname="Courier"];')
    dot.append('  edge [fontname="Courier"];')

    for caller in sorted(call_graph):
        color = "lightblue" if caller in highlight_callers else "white"
        dot.append(f'  "{caller}" [label="{caller}", fillcolor="{color}"];')

    for caller in sorted(call_graph):
        # Update stages are drawn dashed
        is_update = UPDATE_MARKER in caller
        style = "dashed" if is_update else "solid"
        for callee in call_graph[caller]:
            dot.append(f'  "{caller}" -> "{callee}" [style="{style}"];')

    dot.append("}")
    return "\n".join(dot)


def save_dot(
    call_graph: Dict[str, List[str]], path: str, highlight_callers: Optional[Set[str]] = None
):
    """Saves the DOT representation of a call graph to a file."""
    dot_content = export_to_dot(call_graph, highlight_callers)
    with open(path, "w") as f:
        f.write(dot_content)
