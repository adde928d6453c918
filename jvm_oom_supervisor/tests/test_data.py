################################################################################
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################

MIB = 1024 * 1024

# /proc/meminfo of a host with 16 GiB of memory
MEMINFO_TOTAL_KIB = 16777216
MEMINFO_CONTENT = f"""MemTotal:       {MEMINFO_TOTAL_KIB} kB
MemFree:         1203908 kB
MemAvailable:   10331232 kB
Buffers:          545624 kB
Cached:          8493720 kB
SwapCached:            0 kB
"""

# memory.limit_in_bytes reported by cgroup v1 when no limit is set
CGROUP_V1_UNLIMITED = "9223372036854771712"

# Dictionary with test input values and expected budgets, all values in MiB.
BUDGET_EXAMPLES = [
    {
        "total_mib": 2048,
        "thread_count": 200,
        "stack_kib": 256,
        "expected": {
            "metaspace_mib": 256,
            "direct_mib": 256,
            "code_cache_mib": 128,
            "compressed_class_space_mib": 64,
            "stack_reserve_mib": 50,
            "reserve_mib": 163,
            "heap_budget_mib": 1131,
            "init_heap_mib": 339,
            "max_heap_mib": 678,
        },
    },
    {
        "total_mib": 4096,
        "thread_count": 400,
        "stack_kib": 512,
        "expected": {
            "metaspace_mib": 512,
            "direct_mib": 512,
            "code_cache_mib": 128,
            "compressed_class_space_mib": 64,
            "stack_reserve_mib": 200,
            "reserve_mib": 327,
            "heap_budget_mib": 2353,
            "init_heap_mib": 705,
            "max_heap_mib": 1411,
        },
    },
    {
        "total_mib": 512,
        "thread_count": 200,
        "stack_kib": 256,
        "expected": {
            "metaspace_mib": 64,
            "direct_mib": 64,
            "code_cache_mib": 128,
            "compressed_class_space_mib": 64,
            "stack_reserve_mib": 50,
            "reserve_mib": 40,
            "heap_budget_mib": 102,
            "init_heap_mib": 30,
            "max_heap_mib": 61,
        },
    },
    {
        # Smallest limit that still leaves a heap with the default settings
        "total_mib": 361,
        "thread_count": 200,
        "stack_kib": 256,
        "expected": {
            "metaspace_mib": 45,
            "direct_mib": 45,
            "code_cache_mib": 128,
            "compressed_class_space_mib": 64,
            "stack_reserve_mib": 50,
            "reserve_mib": 28,
            "heap_budget_mib": 1,
            "init_heap_mib": 0,
            "max_heap_mib": 0,
        },
    },
]

# Limits, in MiB, that can't hold the off-heap reservations plus the reserve
INSUFFICIENT_LIMITS_MIB = [1, 128, 256, 360]
