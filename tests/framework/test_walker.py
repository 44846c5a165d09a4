"""
Walker Tests - 调用图提取测试
==============================

测试内容：
1. test_single_producer_dedup      - 同一依赖多次读取只记录一次，保持首次出现顺序
2. test_update_stage_split         - 带 update 的 producer 拆分为 g 与 g.update(0)
3. test_update_collapsing          - 多个 update 合并到同一个 caller
4. test_peel_through_let_and_if    - 穿过 LetBinding / Conditional(then) 找到 Sequence
5. test_else_branch_not_peeled     - 剥离只走 then 分支
6. test_updates_without_sequence   - 注册表声称有 update 但树中没有 Sequence
7. test_empty_producer_has_entry   - 没有读取的 producer 也有空条目
8. test_top_level_loads_ignored    - 不在任何 producer 内的读取不记录
9. test_nested_producers_restore   - 嵌套 producer 退出后恢复外层 producer
10. test_loads_in_index_expressions - 索引表达式内的读取也会被记录
11. test_unregistered_producer     - 未注册的 producer 立即报错
12. test_idempotent_walks          - 同一棵树重复遍历得到相同结果
13. test_long_statement_block      - 数千条语句的 block 不受递归深度限制
"""

import unittest
from callgraph_verifier.core import (
    CallGraphWalker,
    StageInfo,
    UnregisteredStageError,
    build_call_graph,
    make_registry,
    split_update_stage,
    update_caller_name,
)
from callgraph_verifier.ir import (
    IntImm,
    Variable,
    BinaryOp,
    Load,
    ProducerScope,
    LetBinding,
    Conditional,
    Sequence,
    For,
    Realize,
    Provide,
    Evaluate,
    block,
)
from callgraph_verifier.verify import check_call_graphs

X = Variable("x")
Y = Variable("y")


def loop2d(body):
    return For("y", IntImm(0), IntImm(16), For("x", IntImm(0), IntImm(16), body))


def store(name, value):
    return Provide(name, value, [X, Y])


class TestCallGraphWalker(unittest.TestCase):
    def test_single_producer_dedup(self):
        value = BinaryOp(
            "+",
            BinaryOp("*", Load("w", [X]), Load("img", [X, Y])),
            Load("w", [BinaryOp("+", X, IntImm(1))]),
        )
        tree = Realize("g", ProducerScope("g", loop2d(store("g", value))))
        calls = build_call_graph(tree, {"g": 0})

        self.assertEqual(calls, {"g": ["w", "img"]})
        self.assertTrue(check_call_graphs(calls, {"g": ["img", "w"]}))
        self.assertFalse(check_call_graphs(calls, {"g": ["w"]}))

    def test_update_stage_split(self):
        init = loop2d(store("g", Load("w", [X])))
        update = loop2d(store("g", BinaryOp("+", Load("w", [X]), Load("g", [X, Y]))))
        tree = ProducerScope("g", Sequence(init, update))

        calls = build_call_graph(tree, [StageInfo("g", update_count=1)])
        self.assertEqual(calls, {"g": ["w"], "g.update(0)": ["w", "g"]})

    def test_update_collapsing(self):
        init = store("h", Load("f"))
        updates = block(
            store("h", BinaryOp("+", Load("f"), Load("h"))),
            store("h", Load("g")),
            store("h", BinaryOp("*", Load("h"), Load("f"))),
        )
        tree = ProducerScope("h", Sequence(init, updates))
        calls = build_call_graph(tree, {"h": 3})

        self.assertEqual(calls, {"h": ["f"], update_caller_name("h"): ["f", "h", "g"]})
        self.assertEqual(update_caller_name("h"), "h.update(0)")

    def test_peel_through_let_and_if(self):
        init = store("g", Load("a"))
        update = store("g", Load("b"))
        cond = BinaryOp("<", Load("bound"), IntImm(8))
        body = LetBinding(
            "t",
            Load("ignored"),
            Conditional(cond, LetBinding("u", IntImm(2), Sequence(init, update))),
        )
        calls = build_call_graph(ProducerScope("g", body), {"g": 1})

        # Only the split parts are walked once a Sequence is found
        self.assertEqual(calls, {"g": ["a"], "g.update(0)": ["b"]})

    def test_else_branch_not_peeled(self):
        cond = BinaryOp("<", X, IntImm(8))
        body = Conditional(
            cond,
            store("g", Load("a")),
            Sequence(store("g", Load("b")), store("g", Load("c"))),
        )
        calls = build_call_graph(ProducerScope("g", body), {"g": 1})

        self.assertEqual(calls, {"g": ["a", "b", "c"]})
        self.assertNotIn("g.update(0)", calls)

    def test_updates_without_sequence(self):
        body = loop2d(store("g", Load("w")))
        init, update = split_update_stage(body)
        self.assertIs(init, body)
        self.assertIsNone(update)

        calls = build_call_graph(ProducerScope("g", body), {"g": 2})
        self.assertEqual(calls, {"g": ["w"]})

    def test_no_updates_keeps_sequence_whole(self):
        body = Sequence(store("g", Load("a")), store("g", Load("b")))
        calls = build_call_graph(ProducerScope("g", body), {"g": 0})
        self.assertEqual(calls, {"g": ["a", "b"]})

    def test_empty_producer_has_entry(self):
        tree = block(
            ProducerScope("f", loop2d(store("f", BinaryOp("+", X, Y)))),
            ProducerScope("g", Sequence(store("g", IntImm(0)), Evaluate(IntImm(1)))),
        )
        calls = build_call_graph(tree, {"f": 0, "g": 1})
        self.assertEqual(calls, {"f": [], "g": [], "g.update(0)": []})

    def test_top_level_loads_ignored(self):
        tree = block(
            Evaluate(Load("img")),
            ProducerScope("f", store("f", Load("img"))),
            Evaluate(Load("f")),
        )
        calls = build_call_graph(tree, {"f": 0})
        self.assertEqual(calls, {"f": ["img"]})

    def test_nested_producers_restore(self):
        inner = ProducerScope("f", store("f", Load("img")))
        outer = ProducerScope(
            "g",
            block(
                store("g", Load("a")),
                inner,
                store("g", Load("f")),
            ),
        )
        calls = build_call_graph(outer, {"f": 0, "g": 0})
        self.assertEqual(calls, {"g": ["a", "f"], "f": ["img"]})

    def test_nested_producer_in_update(self):
        inner = ProducerScope("f", store("f", Load("img")))
        tree = ProducerScope(
            "g",
            Sequence(store("g", Load("a")), block(inner, store("g", Load("f")))),
        )
        calls = build_call_graph(tree, {"f": 0, "g": 1})
        self.assertEqual(calls, {"g": ["a"], "f": ["img"], "g.update(0)": ["f"]})

    def test_loads_in_index_expressions(self):
        tree = ProducerScope("g", store("g", Load("lut", [Load("idx", [X])])))
        calls = build_call_graph(tree, {"g": 0})
        # Index loads are recorded before the enclosing load
        self.assertEqual(calls, {"g": ["idx", "lut"]})

    def test_unregistered_producer(self):
        tree = block(
            ProducerScope("f", store("f", Load("img"))),
            ProducerScope("g", store("g", Load("f"))),
        )
        with self.assertRaises(UnregisteredStageError) as ctx:
            build_call_graph(tree, {"f": 0})
        self.assertEqual(ctx.exception.name, "g")
        self.assertIsInstance(ctx.exception, ValueError)

    def test_idempotent_walks(self):
        tree = ProducerScope(
            "g",
            Sequence(store("g", Load("w")), store("g", BinaryOp("+", Load("g"), Load("w")))),
        )
        walker = CallGraphWalker({"g": 1})
        first = walker.walk(tree)
        second = walker.walk(tree)

        self.assertIsNot(first, second)
        self.assertEqual(first, second)
        self.assertTrue(check_call_graphs(first, second))
        self.assertEqual(first, build_call_graph(tree, {"g": 1}))

    def test_long_statement_block(self):
        n = 5000
        tree = ProducerScope("g", block(*[store("g", Load(f"s{i}")) for i in range(n)]))
        calls = build_call_graph(tree, {"g": 0})
        self.assertEqual(calls["g"], [f"s{i}" for i in range(n)])

        # Same block as the update part of a stage with updates
        tree = ProducerScope(
            "h",
            Sequence(store("h", Load("w")), block(*[store("h", Load(f"s{i}")) for i in range(n)])),
        )
        calls = build_call_graph(tree, {"h": 1})
        self.assertEqual(calls["h"], ["w"])
        self.assertEqual(len(calls["h.update(0)"]), n)


class TestStageRegistry(unittest.TestCase):
    def test_make_registry_forms(self):
        expected = {"f": StageInfo("f"), "g": StageInfo("g", 2)}
        self.assertEqual(make_registry({"f": 0, "g": 2}), expected)
        self.assertEqual(make_registry([StageInfo("f"), StageInfo("g", 2)]), expected)
        self.assertEqual(make_registry(expected), expected)
        self.assertFalse(expected["f"].has_updates)
        self.assertTrue(expected["g"].has_updates)

    def test_make_registry_rejects_bad_input(self):
        with self.assertRaises(ValueError):
            make_registry({"f": StageInfo("g")})
        with self.assertRaises(ValueError):
            StageInfo("f", -1)


if __name__ == "__main__":
    unittest.main()
