"""
Call Graph Verifier Test Suite
==============================

测试模块组织：

tests/
└── framework/                # 核心框架测试
    ├── test_ir.py                # 语句树节点与 IRVisitor 分发
    ├── test_walker.py            # 调用图提取（producer / update / 剥离）
    ├── test_wrap_scenarios.py    # wrapper 场景下的调用图
    ├── test_verify.py            # 调用图比较与图像校验
    ├── test_tree_io.py           # JSON 读写
    ├── test_runner.py            # CallGraphCheck 门面与调试输出
    ├── test_logging.py           # 日志系统测试
    └── test_visualize.py         # DOT 导出

运行测试：
    # 使用 pytest 运行全部
    python -m pytest tests/ -v

    # 运行特定模块
    python -m pytest tests/framework/test_walker.py -v
"""
