"""
Framework Tests - 核心框架测试模块
===================================

模块列表：
- test_ir.py             : 节点 children 顺序、IRVisitor 完整分发
- test_walker.py         : CallGraphWalker 的 producer、update 拆分、去重
- test_wrap_scenarios.py : wrapper 链、共享 wrapper、update 与 wrapper 组合
- test_verify.py         : check_call_graphs 与 check_image
- test_tree_io.py        : 语句树 / 注册表 / 调用图的 JSON 读写
- test_runner.py         : CallGraphCheck 配置、路径加载、调试输出
- test_logging.py        : 日志系统配置和级别控制
- test_visualize.py      : 调用图 DOT 导出
"""
