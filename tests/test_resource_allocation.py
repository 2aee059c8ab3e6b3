import logging

import pytest

from cpm_scheduler.core.algorithms.calendar import WorkCalendar
from cpm_scheduler.core.algorithms.resource_allocation import (
    build_resource_calendars,
    calculate_duration_with_time_off,
    calculate_effective_duration,
    calculate_with_resources,
    collect_time_off_dates,
)
from cpm_scheduler.core.errors import InvalidCalendarError, InvalidResourceCapacityError

from conftest import SUN_THU, by_id, d, make_dep, make_member, make_task, make_time_off


class TestEffectiveDuration:

    @pytest.mark.parametrize("hours, capacity, expected", [
        (16, 4, 4),
        (16, 8, 2),
        (10, 8, 2),
        (8, 8, 1),
    ])
    def test_rounds_up_to_whole_days(self, hours, capacity, expected):
        member = make_member(work_hours_per_day=capacity)

        assert calculate_effective_duration(hours, member) == expected

    @pytest.mark.parametrize("capacity", [0, -4, None])
    def test_invalid_capacity_raises(self, capacity):
        member = make_member(work_hours_per_day=capacity)

        with pytest.raises(InvalidResourceCapacityError):
            calculate_effective_duration(16, member)


class TestResourceCalendars:

    def test_only_approved_time_off_is_collected(self):
        time_off = [
            make_time_off(start='2026-02-15', end='2026-02-16'),
            make_time_off(start='2026-02-18', end='2026-02-18', status='pending'),
        ]

        dates = collect_time_off_dates(time_off)

        assert dates == {'user-1': [d('2026-02-15'), d('2026-02-16')]}

    def test_member_calendar_is_intersection(self):
        project = WorkCalendar(SUN_THU, [d('2026-01-27')])
        member = make_member(work_days=[1, 2, 3, 4, 5])

        calendars = build_resource_calendars([member], [make_time_off(start='2026-01-28', end='2026-01-28')], project)
        calendar = calendars['user-1']

        assert calendar.work_days == frozenset([1, 2, 3, 4])
        assert not calendar.is_working_day(d('2026-01-27'))
        assert not calendar.is_working_day(d('2026-01-28'))
        assert calendar.is_working_day(d('2026-01-29'))

    def test_time_off_of_unknown_member_gets_calendar(self):
        project = WorkCalendar(SUN_THU)

        calendars = build_resource_calendars([], [make_time_off('ghost')], project)

        assert not calendars['ghost'].is_working_day(d('2026-02-15'))


class TestCalculateWithResources:

    def test_time_off_extends_task(self):
        task = make_task('A', 4, assignee_id='user-1')

        result = calculate_with_resources(
            [task], [], d('2026-02-12'), SUN_THU, [], [make_member()], [make_time_off()]
        )
        scheduled = result['tasks'][0]

        assert scheduled.es == d('2026-02-12')
        assert scheduled.ef == d('2026-02-22')
        assert scheduled.ls == d('2026-02-12')
        assert scheduled.is_critical is True
        assert result['project_end_date'] == d('2026-02-22')

    def test_pending_time_off_is_ignored(self):
        task = make_task('A', 4, assignee_id='user-1')

        result = calculate_with_resources(
            [task], [], d('2026-02-12'), SUN_THU, [], [make_member()], [make_time_off(status='pending')]
        )

        assert result['tasks'][0].ef == d('2026-02-17')

    def test_member_work_week(self):
        task = make_task('A', 5, assignee_id='user-1')
        member = make_member(work_days=[0, 1, 2, 3])

        result = calculate_with_resources([task], [], d('2026-01-25'), SUN_THU, [], [member], [])

        assert result['tasks'][0].ef == d('2026-02-01')

    def test_member_week_is_intersected_with_project_week(self):
        task = make_task('A', 4, assignee_id='user-1')
        member = make_member(work_days=[1, 2, 3, 4, 5])

        result = calculate_with_resources([task], [], d('2026-01-25'), SUN_THU, [], [member], [])

        assert result['tasks'][0].es == d('2026-01-26')
        assert result['tasks'][0].ef == d('2026-01-29')

    def test_successor_waits_for_assignee(self):
        tasks = [make_task('A', 2), make_task('B', 1, assignee_id='user-1')]
        time_off = [make_time_off(start='2026-01-27', end='2026-01-28')]

        result = calculate_with_resources(
            tasks, [make_dep('A', 'B')], d('2026-01-25'), SUN_THU, [], [make_member()], time_off
        )
        scheduled = by_id(result['tasks'])

        assert scheduled['A'].ef == d('2026-01-26')
        assert scheduled['B'].es == scheduled['B'].ef == d('2026-01-29')
        assert scheduled['B'].is_critical is True
        # A может закончиться 28-го, B все равно не начнется раньше 29-го
        assert scheduled['A'].slack == 2

    def test_unknown_assignee_uses_project_calendar(self, caplog):
        task = make_task('A', 2, assignee_id='nobody')

        with caplog.at_level(logging.WARNING):
            result = calculate_with_resources([task], [], d('2026-01-25'), SUN_THU, [], [make_member()], [])

        assert result['tasks'][0].ef == d('2026-01-26')
        assert "Исполнитель nobody задачи A не найден" in caplog.text

    def test_finish_to_finish_respects_assignee_time_off(self):
        tasks = [make_task('A', 3), make_task('B', 1, assignee_id='user-1')]
        time_off = [make_time_off(start='2026-01-27', end='2026-01-27')]

        result = calculate_with_resources(
            tasks, [make_dep('A', 'B', type='FF')], d('2026-01-25'), SUN_THU, [], [make_member()], time_off
        )
        scheduled = by_id(result['tasks'])

        assert scheduled['A'].ef == d('2026-01-27')
        assert scheduled['B'].ef >= scheduled['A'].ef
        assert scheduled['B'].es == scheduled['B'].ef == d('2026-01-28')

    def test_start_to_finish_respects_assignee_time_off(self):
        tasks = [make_task('X', 2), make_task('A', 1), make_task('B', 1, assignee_id='user-1')]
        deps = [make_dep('X', 'A'), make_dep('A', 'B', type='SF')]
        time_off = [make_time_off(start='2026-01-27', end='2026-01-27')]

        result = calculate_with_resources(
            tasks, deps, d('2026-01-25'), SUN_THU, [], [make_member()], time_off
        )
        scheduled = by_id(result['tasks'])

        assert scheduled['A'].es == d('2026-01-27')
        assert scheduled['B'].ef >= scheduled['A'].es
        assert scheduled['B'].ef == d('2026-01-28')

    def test_assignee_without_working_days_raises(self):
        task = make_task('A', 1, assignee_id='user-1')
        member = make_member(work_days=[5, 6])

        with pytest.raises(InvalidCalendarError):
            calculate_with_resources([task], [], d('2026-01-25'), SUN_THU, [], [member], [])

    def test_unassigned_member_without_working_days_is_allowed(self):
        member = make_member(work_days=[5, 6])

        result = calculate_with_resources([make_task('A', 1)], [], d('2026-01-25'), SUN_THU, [], [member], [])

        assert result['project_end_date'] == d('2026-01-25')

    def test_empty_project(self):
        result = calculate_with_resources([], [], d('2026-01-25'), SUN_THU, [], [make_member()], [])

        assert result['tasks'] == []
        assert result['project_end_date'] is None


class TestDurationWithTimeOff:

    def test_time_off_inside_task_period(self):
        result = calculate_duration_with_time_off(32, d('2026-02-12'), make_member(), [make_time_off()])

        assert result['base_duration'] == 4
        assert result['time_off_days'] == 3
        assert result['effective_duration'] == 7
        assert len(result['affected_time_off']) == 1

    def test_no_time_off(self):
        result = calculate_duration_with_time_off(16, d('2026-02-12'), make_member(), [])

        assert result == {
            'base_duration': 2,
            'effective_duration': 2,
            'time_off_days': 0,
            'affected_time_off': [],
        }

    def test_time_off_outside_task_period(self):
        time_off = [make_time_off(start='2026-03-01', end='2026-03-05')]

        result = calculate_duration_with_time_off(16, d('2026-02-12'), make_member(), time_off)

        assert result['effective_duration'] == 2
        assert result['affected_time_off'] == []

    def test_pending_time_off_is_ignored(self):
        time_off = [make_time_off(status='pending')]

        result = calculate_duration_with_time_off(32, d('2026-02-12'), make_member(), time_off)

        assert result['effective_duration'] == 4
