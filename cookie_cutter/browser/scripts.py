"""
JavaScript evaluated in the page by :mod:`cookie_cutter.browser.driver`.

The snapshot script returns an object holding the element array and
a JSON-safe payload.  Only the Python side keeps a reference to it
(through a ``JSHandle``), so the page's own globals are never touched.
Every action script receives that object as its first argument and a
snapshot node id (an index into ``elements``) as its second.
"""

from __future__ import annotations

# Elements whose subtrees never contain consent controls.
SKIPPED_TAGS = ("SCRIPT", "STYLE", "NOSCRIPT", "TEMPLATE", "HEAD", "META", "LINK", "SVG")

SNAPSHOT_SCRIPT = """
({ nodeLimit, textLimit, skipped }) => {
    const skip = new Set(skipped);
    const elements = [];
    const nodes = [];
    const roots = [];

    const directText = (el) => {
        let out = '';
        for (const child of el.childNodes) {
            if (child.nodeType === Node.TEXT_NODE) out += child.textContent;
        }
        return out.trim();
    };

    const inlineStyle = (el) => {
        const result = {};
        for (const prop of ['overflow', 'overflowY', 'overflowX', 'position']) {
            const value = el.style ? el.style[prop] : '';
            if (value) result[prop] = value;
        }
        return result;
    };

    const register = (el) => {
        const id = elements.length;
        elements.push(el);
        const cs = getComputedStyle(el);
        const box = el.getBoundingClientRect();
        nodes.push({
            nodeId: id,
            tag: el.tagName.toLowerCase(),
            attributes: {
                id: el.id || '',
                className: typeof el.className === 'string' ? el.className : (el.getAttribute('class') || ''),
                role: el.getAttribute('role') || '',
                ariaLabel: el.getAttribute('aria-label') || '',
                ariaModal: el.getAttribute('aria-modal') || '',
                title: el.getAttribute('title') || '',
                value: el.tagName === 'INPUT' ? (el.value || '') : '',
                href: el.tagName === 'A' ? el.getAttribute('href') : null,
                type: el.getAttribute('type') || '',
            },
            directText: directText(el),
            fullText: (el.innerText || el.textContent || '').trim().slice(0, textLimit),
            style: {
                display: cs.display,
                visibility: cs.visibility,
                opacity: parseFloat(cs.opacity),
                position: cs.position,
                zIndex: cs.zIndex,
                backgroundColor: cs.backgroundColor,
            },
            rect: { x: box.x, y: box.y, width: box.width, height: box.height },
            children: [],
            shadowChildren: null,
            inlineStyle: inlineStyle(el),
        });
        return id;
    };

    // Explicit worklist: [element, parent id or -1, attach as shadow child].
    const work = [[document.documentElement, -1, false]];
    while (work.length && elements.length < nodeLimit) {
        const [el, parentId, viaShadow] = work.pop();
        if (skip.has(el.tagName.toUpperCase())) continue;
        const id = register(el);
        if (parentId < 0) {
            roots.push(id);
        } else if (viaShadow) {
            const parent = nodes[parentId];
            (parent.shadowChildren = parent.shadowChildren || []).push(id);
        } else {
            nodes[parentId].children.push(id);
        }
        const light = Array.from(el.children);
        for (let i = light.length - 1; i >= 0; i--) work.push([light[i], id, false]);
        if (el.shadowRoot) {
            nodes[id].shadowChildren = [];
            const shadow = Array.from(el.shadowRoot.children);
            for (let i = shadow.length - 1; i >= 0; i--) work.push([shadow[i], id, true]);
        }
    }

    return {
        elements,
        payload: {
            viewport: { width: window.innerWidth, height: window.innerHeight },
            rootIds: roots,
            nodes,
        },
    };
}
"""

PAYLOAD_SCRIPT = "(snap) => snap.payload"

CLICK_SCRIPT = """
(snap, id) => {
    const el = snap.elements[id];
    if (!el || !el.isConnected) throw new Error('element detached');
    el.click();
}
"""

DISPATCH_CLICK_SCRIPT = """
(snap, id) => {
    const el = snap.elements[id];
    if (!el || !el.isConnected) throw new Error('element detached');
    el.dispatchEvent(new MouseEvent('click', { bubbles: true, cancelable: true, view: window }));
}
"""

REVEAL_SCRIPT = """
(snap, id) => {
    let el = snap.elements[id];
    for (let level = 0; el && level <= 5; level++) {
        const cs = getComputedStyle(el);
        if (cs.display === 'none') el.style.setProperty('display', 'block', 'important');
        if (cs.visibility === 'hidden') el.style.setProperty('visibility', 'visible', 'important');
        if (parseFloat(cs.opacity) === 0) el.style.setProperty('opacity', '1', 'important');
        el = el.parentElement || (el.getRootNode() instanceof ShadowRoot ? el.getRootNode().host : null);
    }
}
"""

REMOVE_SCRIPT = """
(snap, ids) => {
    let removed = 0;
    for (const id of ids) {
        const el = snap.elements[id];
        if (el && el.isConnected) {
            el.remove();
            removed++;
        }
    }
    return removed;
}
"""

RELEASE_SCROLL_LOCK_SCRIPT = """
(classNames) => {
    for (const el of [document.documentElement, document.body]) {
        if (!el) continue;
        el.classList.remove(...classNames);
        for (const prop of ['overflow', 'overflowY', 'overflowX', 'position']) {
            el.style[prop] = '';
        }
    }
}
"""

OBSERVE_SCRIPT = """
(bindingName) => {
    const observer = new MutationObserver((records) => {
        if (records.some((r) => r.addedNodes.length || r.removedNodes.length)) {
            window[bindingName]();
        }
    });
    observer.observe(document.documentElement, { childList: true, subtree: true });
    return observer;
}
"""

DISCONNECT_SCRIPT = "(observer) => observer.disconnect()"

VISIBLE_STATE_EXPRESSION = "() => document.visibilityState === 'visible'"
