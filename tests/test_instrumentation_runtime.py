#!/usr/bin/env python3
"""Run the instrumentation hooks inside an offscreen Qt WebEngine page.

The page gets stand-ins for ``fetch``, ``XMLHttpRequest``, ``console.warn``
and ``QWebChannel`` ahead of the hooks, so no network or real channel is
involved and the test controls when the bridge connects.
"""

import json
import os
import sys
import time
import unittest

os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')
os.environ.setdefault('QTWEBENGINE_CHROMIUM_FLAGS', '--no-sandbox --disable-gpu')

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from PyQt6.QtCore import QUrl
from PyQt6.QtTest import QTest
from PyQt6.QtWidgets import QApplication

try:
    from PyQt6.QtWebEngineCore import QWebEnginePage, QWebEngineProfile, QWebEngineScript
except ImportError:
    QWebEnginePage = None

from modules.weblog.bridge import BRIDGE_NAME, BridgeReceiver
from modules.weblog.instrumentation import build_instrumentation_script
from modules.weblog.models import ConsoleLevel, RequestKind
from modules.weblog.store import LogStore

PAGE_STUBS = """
window.__sent = [];
window.__originalCalls = [];
window.__failDelivery = false;
window.__fetchPromise = Promise.resolve({ status: 404, url: "https://example.test/api" });
window.fetch = function() { return window.__fetchPromise; };
console.warn = function() {
  window.__originalCalls.push(Array.prototype.slice.call(arguments));
  return "warned";
};
function StubXHR() { this.listeners = {}; }
StubXHR.prototype.open = function(method, url) { this.opened = [method, url]; };
StubXHR.prototype.send = function() {};
StubXHR.prototype.addEventListener = function(name, fn) { this.listeners[name] = fn; };
window.XMLHttpRequest = StubXHR;
window.PerformanceObserver = function(callback) {
  window.__observeResources = function(entries) {
    callback({ getEntries: function() { return entries; } });
  };
};
window.PerformanceObserver.prototype.observe = function() {};
window.qt = { webChannelTransport: {} };
window.QWebChannel = function(transport, ready) {
  window.__connectChannel = function() {
    var objects = {};
    objects["%(bridge)s"] = {
      postMessage: function(message) {
        if (window.__failDelivery) { throw new Error("delivery failed"); }
        window.__sent.push(JSON.parse(message));
      }
    };
    ready({ objects: objects });
  };
};
""" % {'bridge': BRIDGE_NAME}

EXERCISE_HOOKS = """
(function() {
  var out = {};
  function xhrMessages() {
    return window.__sent.filter(function(m) { return m.payload.kind === "xhr"; });
  }
  out.warnReturn = console.warn("disk", 42);
  out.fetchSame = fetch("https://example.test/api", { method: "post" }) === window.__fetchPromise;

  var xhr = new XMLHttpRequest();
  xhr.open("put", "https://example.test/upload");
  out.xhrAfterOpen = xhrMessages().length;
  xhr.send("body");
  out.xhrAfterSend = xhrMessages();
  out.xhrOpened = xhr.opened;

  window.__failDelivery = true;
  try {
    out.failedWarn = console.warn("lost");
    out.contained = true;
  } catch (e) {
    out.contained = false;
  }
  window.__failDelivery = false;
  out.originalCalls = window.__originalCalls;
  return JSON.stringify(out);
})()
"""


@unittest.skipIf(QWebEnginePage is None, 'Qt WebEngine is not installed')
class InstrumentationRuntimeTest(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._app = QApplication.instance() or QApplication([])

    def setUp(self) -> None:
        self.profile = QWebEngineProfile()
        self.page = QWebEnginePage(self.profile)
        self.loaded = []
        self.page.loadFinished.connect(self.loaded.append)

        script = QWebEngineScript()
        script.setName('instrumentation-under-test')
        script.setSourceCode(build_instrumentation_script(BRIDGE_NAME, prelude=PAGE_STUBS))
        script.setInjectionPoint(QWebEngineScript.InjectionPoint.DocumentCreation)
        script.setWorldId(QWebEngineScript.ScriptWorldId.MainWorld)
        self.page.scripts().insert(script)

        self.page.setHtml('<html><head><title>t</title></head><body></body></html>', QUrl('https://example.test/'))
        self._wait_for(lambda: bool(self.loaded))
        self.assertTrue(self.loaded[0], 'test page failed to load')

    def tearDown(self) -> None:
        self.page.deleteLater()
        QTest.qWait(10)
        self.profile.deleteLater()

    def _wait_for(self, condition, timeout: float = 15.0) -> None:
        deadline = time.monotonic() + timeout
        while not condition():
            if time.monotonic() > deadline:
                self.fail('timed out waiting for the page')
            QTest.qWait(20)

    def _evaluate(self, source: str):
        results = []
        self.page.runJavaScript(source, results.append)
        self._wait_for(lambda: bool(results))
        return results[0]

    def _evaluate_json(self, source: str):
        return json.loads(self._evaluate(source))

    def _sent(self):
        return self._evaluate_json("JSON.stringify(window.__sent)")

    def test_messages_are_queued_until_channel_connects(self) -> None:
        self._evaluate('console.log("early", 1); "done"')
        self.assertEqual(self._sent(), [])

        self._evaluate('window.__connectChannel(); "connected"')

        self.assertIn(
            {'type': 'console', 'payload': {'level': 'log', 'args': ['early', '1']}},
            self._sent(),
        )

    def test_hooks_forward_without_changing_page_behaviour(self) -> None:
        self._evaluate('window.__connectChannel(); "connected"')

        out = self._evaluate_json(EXERCISE_HOOKS)

        # console keeps calling the page's own implementation
        self.assertEqual(out['warnReturn'], 'warned')
        self.assertEqual(out['originalCalls'], [['disk', 42], ['lost']])
        # fetch hands back the very promise the page's fetch produced
        self.assertTrue(out['fetchSame'])
        # xhr reports at send time with what open recorded
        self.assertEqual(out['xhrAfterOpen'], 0)
        self.assertEqual(
            out['xhrAfterSend'],
            [{'type': 'request', 'payload': {'kind': 'xhr', 'method': 'PUT', 'url': 'https://example.test/upload'}}],
        )
        self.assertEqual(out['xhrOpened'], ['put', 'https://example.test/upload'])
        # a failing bridge never breaks the page call
        self.assertTrue(out['contained'])
        self.assertEqual(out['failedWarn'], 'warned')

        self._wait_for(lambda: any(m['payload'].get('status') == 404 for m in self._sent()))
        sent = self._sent()
        self.assertIn(
            {'type': 'console', 'payload': {'level': 'warn', 'args': ['disk', '42']}},
            sent,
        )
        self.assertIn(
            {'type': 'request', 'payload': {'kind': 'fetch', 'method': 'POST', 'url': 'https://example.test/api'}},
            sent,
        )
        self.assertIn(
            {
                'type': 'request',
                'payload': {'kind': 'fetch', 'method': 'POST', 'url': '404 https://example.test/api', 'status': 404},
            },
            sent,
        )

    def test_page_messages_become_store_entries(self) -> None:
        self._evaluate('window.__connectChannel(); "connected"')
        self._evaluate(EXERCISE_HOOKS)
        self._wait_for(lambda: any(m['payload'].get('status') == 404 for m in self._sent()))

        store = LogStore()
        receiver = BridgeReceiver(store)
        for message in self._sent():
            receiver.handle_message(json.dumps(message))

        self.assertEqual(receiver.discarded_count, 0)
        self.assertIn((ConsoleLevel.WARN, 'disk 42'), [(e.level, e.message) for e in store.console_entries()])
        errors = [e for e in store.request_entries() if e.status == 404]
        self.assertEqual([(e.kind, e.method) for e in errors], [(RequestKind.FETCH, 'POST')])

    def test_seen_resources_are_capped(self) -> None:
        self._evaluate('window.__connectChannel(); "connected"')
        self._evaluate("""
            (function() {
              var first = { name: "https://example.test/a.png", startTime: 1, initiatorType: "img" };
              window.__observeResources([first, first]);
              var others = [];
              for (var i = 0; i < 500; i++) {
                others.push({ name: "https://example.test/r" + i + ".js", startTime: 2, initiatorType: "script" });
              }
              window.__observeResources(others);
              window.__observeResources([first]);
              return "done";
            })()
        """)

        resources = [m for m in self._sent() if m['payload'].get('kind') == 'resource']
        first = [m for m in resources if m['payload']['url'] == 'https://example.test/a.png']
        # duplicates are dropped until the key ages out of the 500-entry window
        self.assertEqual(len(first), 2)
        self.assertEqual(len(resources), 502)
        self.assertEqual(first[0]['payload']['method'], 'img')

    def test_install_guard_keeps_hooks_single(self) -> None:
        self._evaluate('window.__connectChannel(); "connected"')
        source = build_instrumentation_script(BRIDGE_NAME)
        self._evaluate(source + '\n;"reinstalled"')

        self._evaluate('console.log("once"); "done"')

        once = [m for m in self._sent() if m['payload'].get('args') == ['once']]
        self.assertEqual(len(once), 1)


if __name__ == '__main__':
    unittest.main()
