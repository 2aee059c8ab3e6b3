import pytest

from cpm_scheduler.core.algorithms.critical_path import (
    calculate_critical_path,
    calculate_slack,
    find_project_end,
    order_critical_chain,
)
from cpm_scheduler.core.errors import CircularDependencyError, InvalidCalendarError

from conftest import SUN_THU, by_id, d, make_dep, make_task

START = d('2026-01-25')


@pytest.fixture
def merge_network():
    """A(3) и B(4) сходятся в C(2)"""
    tasks = [make_task('A', 3), make_task('B', 4), make_task('C', 2)]
    deps = [make_dep('A', 'C'), make_dep('B', 'C')]
    return tasks, deps


class TestCalculateSlack:

    def test_slack_counts_working_days(self):
        task = make_task('A', 2, es=d('2026-01-25'), ls=d('2026-01-29'))

        result = calculate_slack([task], SUN_THU, [])

        assert result[0].slack == 4
        assert result[0].is_critical is False

    def test_zero_slack_is_critical(self):
        task = make_task('A', 2, es=d('2026-01-25'), ls=d('2026-01-25'))

        assert calculate_slack([task], SUN_THU, [])[0].is_critical is True

    def test_weekend_does_not_count_as_slack(self):
        task = make_task('A', 1, es=d('2026-01-29'), ls=d('2026-02-01'))

        assert calculate_slack([task], SUN_THU, [])[0].slack == 1

    def test_negative_slack_is_critical(self):
        task = make_task('A', 1, es=d('2026-01-27'), ls=d('2026-01-25'))

        result = calculate_slack([task], SUN_THU, [])

        assert result[0].slack == -2
        assert result[0].is_critical is True


class TestCalculateCriticalPath:

    def test_empty_project(self):
        result = calculate_critical_path([], [], START, SUN_THU, [])

        assert result == {'tasks': [], 'critical_path': [], 'project_end_date': None}

    def test_single_task_is_critical(self):
        result = calculate_critical_path([make_task('A', 3)], [], START, SUN_THU, [])

        assert result['critical_path'] == ['A']
        assert result['project_end_date'] == d('2026-01-27')
        assert result['tasks'][0].slack == 0

    def test_merge_network(self, merge_network):
        tasks, deps = merge_network

        result = calculate_critical_path(tasks, deps, START, SUN_THU, [])
        scheduled = by_id(result['tasks'])

        assert set(result['critical_path']) == {'B', 'C'}
        assert result['project_end_date'] == d('2026-02-01')
        assert scheduled['A'].slack == 1
        assert scheduled['A'].lf == d('2026-01-28')
        assert (scheduled['C'].es, scheduled['C'].ef) == (d('2026-01-29'), d('2026-02-01'))

    def test_every_task_has_all_dates(self, merge_network):
        tasks, deps = merge_network

        result = calculate_critical_path(tasks, deps, START, SUN_THU, [])

        for task in result['tasks']:
            assert task.es <= task.ef
            assert task.ls <= task.lf
            assert task.es <= task.ls
            assert task.slack >= 0

    def test_critical_tasks_finish_by_project_end(self, merge_network):
        tasks, deps = merge_network

        result = calculate_critical_path(tasks, deps, START, SUN_THU, [])

        assert max(task.ef for task in result['tasks']) == result['project_end_date']
        for task in result['tasks']:
            if task.is_critical:
                assert task.es == task.ls

    def test_results_keep_input_order(self):
        tasks = [make_task('C', 1), make_task('A', 1), make_task('B', 1)]
        deps = [make_dep('A', 'B'), make_dep('B', 'C')]

        result = calculate_critical_path(tasks, deps, START, SUN_THU, [])

        assert [task.id for task in result['tasks']] == ['C', 'A', 'B']

    def test_inputs_are_not_mutated(self, merge_network):
        tasks, deps = merge_network

        calculate_critical_path(tasks, deps, START, SUN_THU, [])

        assert all(task.es is None and task.ls is None for task in tasks)

    def test_repeated_runs_give_same_result(self, merge_network):
        tasks, deps = merge_network

        first = calculate_critical_path(tasks, deps, START, SUN_THU, [])
        second = calculate_critical_path(tasks, deps, START, SUN_THU, [])

        assert [t.to_dict() for t in first['tasks']] == [t.to_dict() for t in second['tasks']]
        assert first['project_end_date'] == second['project_end_date']

    def test_holiday_delays_project(self):
        result = calculate_critical_path([make_task('A', 2)], [], START, SUN_THU, [d('2026-01-26')])

        assert result['project_end_date'] == d('2026-01-27')

    def test_cycle_raises(self):
        tasks = [make_task('A'), make_task('B')]
        deps = [make_dep('A', 'B'), make_dep('B', 'A')]

        with pytest.raises(CircularDependencyError):
            calculate_critical_path(tasks, deps, START, SUN_THU, [])

    def test_empty_calendar_raises(self):
        with pytest.raises(InvalidCalendarError):
            calculate_critical_path([make_task('A')], [], START, [], [])

    def test_only_milestones(self):
        result = calculate_critical_path([make_task('M', 0)], [], START, SUN_THU, [])

        assert result['project_end_date'] == START
        assert result['critical_path'] == ['M']


class TestHelpers:

    def test_find_project_end_ignores_unscheduled(self):
        tasks = [make_task('A', ef=d('2026-01-27')), make_task('B')]

        assert find_project_end(tasks) == d('2026-01-27')
        assert find_project_end([make_task('B')]) is None

    def test_order_critical_chain(self):
        tasks = [make_task('A', 2), make_task('B', 5), make_task('C', 2)]
        deps = [make_dep('A', 'C'), make_dep('B', 'C')]

        result = calculate_critical_path(tasks, deps, START, SUN_THU, [])

        assert order_critical_chain(result['tasks'], deps) == [['B', 'C']]

    def test_parallel_critical_chains(self):
        tasks = [make_task('A', 2), make_task('B', 2)]

        result = calculate_critical_path(tasks, [], START, SUN_THU, [])

        assert order_critical_chain(result['tasks'], []) == [['A'], ['B']]

    def test_no_critical_tasks(self):
        assert order_critical_chain([make_task('A')], []) == []


class TestProjectEnd:

    def test_project_end_is_latest_finish_of_any_task(self):
        tasks = [make_task('A', 10), make_task('B', 2)]

        result = calculate_critical_path(tasks, [make_dep('A', 'B', type='SS')], START, SUN_THU, [])

        assert result['project_end_date'] == d('2026-02-05')
        assert result['critical_path'] == ['A']

    def test_start_to_finish_predecessor_is_critical(self):
        tasks = [make_task('A', 3), make_task('B', 2)]

        result = calculate_critical_path(tasks, [make_dep('A', 'B', type='SF')], START, SUN_THU, [])
        scheduled = by_id(result['tasks'])

        assert result['project_end_date'] == d('2026-01-27')
        assert result['critical_path'] == ['A']
        assert scheduled['A'].lf == d('2026-01-27')
        assert scheduled['B'].slack == 1

    def test_no_task_finishes_after_project_end(self):
        tasks = [make_task('A', 3), make_task('B', 2), make_task('C', 1)]
        deps = [make_dep('A', 'B', type='SF'), make_dep('A', 'C', type='SS', lag_days=1)]

        result = calculate_critical_path(tasks, deps, START, SUN_THU, [])

        assert all(task.lf <= result['project_end_date'] for task in result['tasks'])
