"""
Tests for FetchedJobSink ordering, draining and thread safety.
"""

import threading

import pytest

from watchtrigger.triggers import FetchedJobSink, JobDescriptor


def make_job(name: str) -> JobDescriptor:
    return JobDescriptor(
        job_id="1",
        trigger_id="dir-trigger-1",
        dir_filter_pattern=f"/root/{name}",
        source_pattern="/root/*",
    )


class TestFetchedJobSink:
    def test_all_preserves_emission_order(self):
        sink = FetchedJobSink()
        for name in ["c.log", "a.log", "b.log"]:
            sink.append(make_job(name))

        assert [j.dir_filter_pattern for j in sink.all()] == [
            "/root/c.log",
            "/root/a.log",
            "/root/b.log",
        ]

    def test_all_is_non_destructive_copy(self):
        sink = FetchedJobSink()
        sink.append(make_job("1.log"))

        jobs = sink.all()
        jobs.clear()

        assert len(sink) == 1
        assert len(sink.all()) == 1

    def test_drain_returns_and_empties(self):
        sink = FetchedJobSink()
        sink.append(make_job("1.log"))
        sink.append(make_job("2.log"))

        drained = sink.drain()

        assert len(drained) == 2
        assert len(sink) == 0
        assert sink.drain() == []

    def test_clear(self):
        sink = FetchedJobSink()
        sink.append(make_job("1.log"))

        sink.clear()

        assert sink.all() == []

    def test_concurrent_append_and_drain_loses_nothing(self):
        """
        GIVEN: Writers appending while a reader drains
        WHEN: All threads finish
        THEN: Every appended job was drained exactly once
        """
        sink = FetchedJobSink()
        drained = []
        done = threading.Event()

        def writer(prefix):
            for i in range(200):
                sink.append(make_job(f"{prefix}-{i}.log"))

        def reader():
            while not done.is_set():
                drained.extend(sink.drain())
            drained.extend(sink.drain())

        reader_thread = threading.Thread(target=reader)
        reader_thread.start()
        writers = [threading.Thread(target=writer, args=(w,)) for w in "abcd"]
        for t in writers:
            t.start()
        for t in writers:
            t.join()
        done.set()
        reader_thread.join()

        paths = [j.dir_filter_pattern for j in drained]
        assert len(paths) == 800
        assert len(set(paths)) == 800


class TestJobDescriptor:
    def test_defaults(self):
        job = make_job("1.log")

        assert job.id
        assert job.offset is None
        assert job.properties == {}
        assert job.created_at.tzinfo is not None

    def test_immutable(self):
        job = make_job("1.log")
        with pytest.raises(Exception):
            job.offset = "5"

    @pytest.mark.posix
    def test_relative_path_rejected(self):
        with pytest.raises(ValueError):
            JobDescriptor(
                job_id="1",
                trigger_id="t",
                dir_filter_pattern="relative/1.log",
                source_pattern="/root/*",
            )

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            JobDescriptor(
                job_id="1",
                trigger_id="t",
                dir_filter_pattern="/root/1.log",
                source_pattern="/root/*",
                unexpected=True,
            )
