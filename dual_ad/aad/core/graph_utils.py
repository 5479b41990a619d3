"""
Graph utilities
Print and analyze the structure of a reverse-mode tape.
"""

import numpy as np
from typing import Dict, List
from collections import Counter


def _fan_outs(tape) -> List[int]:
    fan_outs = [0] * len(tape.nodes)
    for node in tape.nodes:
        for h in node.operands:
            fan_outs[h] += 1
    return fan_outs


def get_graph_stats(tape) -> Dict:
    """
    Graph statistics (no printing).

    Returns:
        dict with node/edge counts, fan-in/fan-out extremes and averages,
        operation counts, and the handles of nodes shared by several parents.
    """
    if not tape.nodes:
        return {
            'nodes': 0,
            'edges': 0,
            'max_fan_in': 0,
            'avg_fan_in': 0.0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'shared': [],
            'operations': {}
        }

    n_nodes = len(tape.nodes)
    fan_ins = [len(node.operands) for node in tape.nodes]
    fan_outs = _fan_outs(tape)
    op_counter = Counter(node.op_tag for node in tape.nodes)

    return {
        'nodes': n_nodes,
        'edges': sum(fan_ins),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'shared': [h for h, k in enumerate(fan_outs) if k > 1],
        'operations': dict(op_counter)
    }


def print_graph_summary(tape, detailed: bool = False) -> Dict:
    """
    Print a summary of the graph.

    Args:
        tape: Tape object
        detailed: also list every node (graphs of at most 100 nodes)

    Returns:
        the statistics dict from get_graph_stats
    """
    if not tape.nodes:
        print("Empty computation graph")
        return {}

    stats = get_graph_stats(tape)

    print("\n" + "="*70)
    print("COMPUTATION GRAPH SUMMARY")
    print("="*70)
    print(f"Total nodes:        {stats['nodes']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print(f"Shared nodes:       {len(stats['shared'])}")
    print()
    print("Operation breakdown:")
    for op_type, count in Counter(stats['operations']).most_common(10):
        pct = 100.0 * count / stats['nodes']
        print(f"  {op_type:12s}: {count:6,} ({pct:5.1f}%)")

    if detailed and stats['nodes'] <= 100:
        print()
        print_computation_graph(tape, max_nodes=100)
    else:
        print("="*70 + "\n")

    return stats


def print_computation_graph(tape, max_nodes: int = 20) -> None:
    """
    Print one line per node: handle, tag, value, grad and operand handles.
    """
    print("="*70)
    print("COMPUTATION GRAPH STRUCTURE")
    print("="*70)

    if not tape.nodes:
        print("Empty graph")
        return

    n_show = min(len(tape.nodes), max_nodes)

    for i, node in enumerate(tape.nodes[:n_show]):
        tag = node.op_tag if node.name is None else f"{node.op_tag}:{node.name}"
        if node.operands:
            parent_info = ", ".join(f"Node{h}" for h in node.operands)
            print(f"Node {i:4d}: {tag:12s} ({node.value:10.6f}, grad {node.grad:10.6f}) <- [{parent_info}]")
        else:
            print(f"Node {i:4d}: {tag:12s} ({node.value:10.6f}, grad {node.grad:10.6f}) [leaf]")

    if len(tape.nodes) > max_nodes:
        print(f"... ({len(tape.nodes) - max_nodes} more nodes)")

    print("="*70 + "\n")


def analyze_graph_complexity(tape) -> str:
    """
    Short text report on graph size, branching and the most common operations.
    """
    stats = get_graph_stats(tape)

    if stats['nodes'] == 0:
        return "Empty computation graph"

    report = []
    report.append("Graph Complexity Analysis:")
    report.append(f"  Total operations: {stats['nodes']:,}")
    report.append(f"  Total connections: {stats['edges']:,}")
    report.append(f"  Average branching: {stats['avg_fan_out']:.2f}")
    report.append(f"  Multi-parent nodes: {len(stats['shared'])}")

    if stats['operations']:
        top_ops = sorted(stats['operations'].items(), key=lambda x: x[1], reverse=True)[:3]
        report.append("  Top operations:")
        for op, count in top_ops:
            pct = 100.0 * count / stats['nodes']
            report.append(f"    - {op}: {pct:.1f}%")

    return "\n".join(report)
