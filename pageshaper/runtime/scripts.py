"""In-page JavaScript for PlaywrightRuntime.

Every script is a fixed function evaluated with a JSON argument object; none
of them is assembled from caller-supplied text. The shared helpers are
prepended to each function body at import time.
"""

from __future__ import annotations

OVERLAY_ID = "pageshaper-overlay"
MARKER_ATTRIBUTE = "data-pageshaper-selected"
SELECTION_BINDING = "__pageshaperSelection"

_HELPERS = r"""
    const MARKER = 'data-pageshaper-selected';
    const SAVED_OUTLINE = 'data-pageshaper-outline';
    const OVERLAY_ID = 'pageshaper-overlay';

    function hasStableId(el) {
        const id = el.id;
        if (!id || (id.includes('"') && id.includes("'"))) return false;
        return document.getElementById(id) === el;
    }

    function addressOf(el) {
        const steps = [];
        let node = el;
        while (node && node.nodeType === Node.ELEMENT_NODE) {
            if (hasStableId(node)) return { anchor: node.id, steps };
            const parent = node.parentElement;
            const ordinal = parent ? Array.prototype.indexOf.call(parent.children, node) + 1 : 1;
            steps.unshift([node.tagName.toLowerCase(), ordinal]);
            node = parent;
        }
        return { anchor: null, steps };
    }

    function resolveAddress(address) {
        let node = document;
        if (address.anchor !== null && address.anchor !== undefined) {
            node = document.getElementById(address.anchor);
            if (!node) return null;
        }
        for (const [tag, ordinal] of address.steps) {
            const next = node.children[ordinal - 1];
            if (!next || next.tagName.toLowerCase() !== tag) return null;
            node = next;
        }
        return node === document ? null : node;
    }

    function resolveTarget(target) {
        if (target.address) {
            const node = resolveAddress(target.address);
            return node ? [node] : [];
        }
        return Array.from(document.querySelectorAll(target.selector));
    }

    function isEngineNode(el) {
        return el.closest('#' + OVERLAY_ID) !== null;
    }

    function applyStyles(el, styles) {
        for (const [key, value] of Object.entries(styles)) {
            if (key.includes('-')) el.style.setProperty(key, value);
            else el.style[key] = value;
        }
    }

    function setMarker(el, selected, color) {
        if (selected) {
            if (!el.hasAttribute(MARKER)) el.setAttribute(SAVED_OUTLINE, el.style.outline || '');
            el.setAttribute(MARKER, 'true');
            el.style.outline = '2px solid ' + color;
        } else if (el.hasAttribute(MARKER)) {
            el.style.outline = el.getAttribute(SAVED_OUTLINE) || '';
            el.removeAttribute(MARKER);
            el.removeAttribute(SAVED_OUTLINE);
        }
    }

    function describe(el, textLimit, includeBox) {
        const cs = getComputedStyle(el);
        const styles = {
            display: cs.display,
            color: cs.color,
            fontSize: cs.fontSize,
            padding: cs.padding,
            margin: cs.margin,
        };
        if (includeBox) {
            styles.width = cs.width;
            styles.height = cs.height;
        }
        const attributes = {};
        for (const attr of Array.from(el.attributes)) {
            if (attr.name === MARKER || attr.name === SAVED_OUTLINE) continue;
            attributes[attr.name] = attr.value;
        }
        return {
            address: addressOf(el),
            tag: el.tagName.toLowerCase(),
            text: (el.textContent || '').trim().slice(0, textLimit),
            attributes,
            styles,
        };
    }
"""


def _script(body: str, param: str = "args") -> str:
    return f"({param}) => {{\n{_HELPERS}\n{body}\n}}"


# ----------------------------------------------------------------------
# Queries
# ----------------------------------------------------------------------

DOCUMENT_IDENTITY_JS = _script(r"""
    return { url: location.href, title: document.title || '' };
""")

PAGE_SNAPSHOT_JS = _script(r"""
    const bodyText = document.body ? (document.body.innerText || '') : '';
    const wordCount = bodyText.split(/\s+/).filter(w => w.length > 0).length;

    const headings = Array.from(document.querySelectorAll('h1, h2, h3, h4, h5, h6')).map(h => ({
        level: parseInt(h.tagName.substring(1), 10),
        text: (h.textContent || '').trim(),
    }));

    const sections = [];
    for (const s of document.querySelectorAll('main, section, article')) {
        const text = (s.textContent || '').trim().slice(0, args.excerptLength);
        if (text) sections.push({ address: addressOf(s), text });
    }

    const navigation = Array.from(document.querySelectorAll('nav a, [role="navigation"] a'))
        .slice(0, args.navigationLimit)
        .map(a => ({ address: addressOf(a), text: (a.textContent || '').trim() }));

    return {
        url: location.href,
        title: document.title || '',
        wordCount,
        elementCount: Array.from(document.querySelectorAll('*')).filter(el => !isEngineNode(el)).length,
        imageCount: document.querySelectorAll('img').length,
        linkCount: document.querySelectorAll('a').length,
        formCount: document.querySelectorAll('form').length,
        headings,
        sections,
        navigation,
    };
""")

DESCRIBE_ELEMENTS_JS = _script(r"""
    let nodes = Array.from(document.querySelectorAll(args.selector));
    if (args.limit !== null && args.limit !== undefined) nodes = nodes.slice(0, args.limit);
    return nodes.map(el => describe(el, args.textLimit, args.includeBox));
""")

DESCRIBE_STRUCTURAL_JS = _script(r"""
    const result = [];
    for (const tag of args.tags) {
        for (const el of document.querySelectorAll(tag)) {
            if (result.length >= args.limit) return result;
            if (isEngineNode(el)) continue;
            result.push(describe(el, args.textLimit, true));
        }
    }
    return result;
""")

RESOLVE_ADDRESS_JS = _script(r"""
    const el = resolveAddress(args.address);
    return el ? describe(el, args.textLimit, false) : null;
""")

ADVISOR_METRICS_JS = _script(r"""
    const SKIPPED = new Set(['SCRIPT', 'STYLE', 'NOSCRIPT', 'TEMPLATE']);
    const textSamples = [];
    for (const el of document.querySelectorAll('body *')) {
        if (SKIPPED.has(el.tagName) || isEngineNode(el)) continue;
        const textLength = (el.textContent || '').trim().length;
        if (textLength <= args.minTextLength) continue;
        const cs = getComputedStyle(el);
        textSamples.push({
            fontSize: cs.fontSize,
            padding: cs.padding,
            margin: cs.margin,
            textLength,
        });
    }
    return {
        navLinkCount: document.querySelectorAll('nav a, [role="navigation"] a').length,
        headingCount: document.querySelectorAll('h1, h2, h3').length,
        imagesMissingAlt: Array.from(document.querySelectorAll('img'))
            .filter(img => !img.getAttribute('alt')).length,
        textSamples,
    };
""")

MARKED_ADDRESSES_JS = _script(r"""
    return Array.from(document.querySelectorAll('[' + MARKER + ']')).map(addressOf);
""")

# Evaluated on an ElementHandle: the element is the function parameter.
ADDRESS_OF_JS = _script(r"""
    return addressOf(el);
""", param="el")

# ----------------------------------------------------------------------
# Mutations
# ----------------------------------------------------------------------

INSTALL_MODE_JS = _script(r"""
    const REGISTRY = '__pageshaperMode';
    const previous = window[REGISTRY];
    if (previous) {
        for (const [type, fn, capture] of previous.listeners) {
            document.removeEventListener(type, fn, capture);
        }
        if (previous.overlay) previous.overlay.remove();
    }
    const stale = document.getElementById(OVERLAY_ID);
    if (stale) stale.remove();

    const state = { mode: args.mode, listeners: [], overlay: null };
    window[REGISTRY] = state;
    const listen = (type, fn, capture) => {
        document.addEventListener(type, fn, capture);
        state.listeners.push([type, fn, capture]);
    };

    if (args.mode === 'inspect') {
        const overlay = document.createElement('div');
        overlay.id = OVERLAY_ID;
        overlay.style.cssText = 'position:fixed;top:0;left:0;width:0;height:0;pointer-events:none;z-index:2147483647;';
        const box = document.createElement('div');
        box.style.cssText = 'position:fixed;display:none;pointer-events:none;background:rgba(37,99,235,0.1);'
            + 'border:2px solid ' + args.selectionColor + ';';
        const label = document.createElement('div');
        label.style.cssText = 'position:fixed;display:none;pointer-events:none;padding:4px 8px;color:white;'
            + 'border-radius:4px;font:bold 12px sans-serif;white-space:nowrap;background:' + args.selectionColor + ';';
        overlay.append(box, label);
        (document.body || document.documentElement).appendChild(overlay);
        state.overlay = overlay;

        listen('mouseover', (e) => {
            const target = e.target;
            if (!(target instanceof Element) || isEngineNode(target)) return;
            const rect = target.getBoundingClientRect();
            Object.assign(box.style, {
                display: 'block',
                left: rect.left + 'px',
                top: rect.top + 'px',
                width: rect.width + 'px',
                height: rect.height + 'px',
            });
            label.textContent = target.tagName.toLowerCase();
            Object.assign(label.style, {
                display: 'block',
                left: rect.left + 'px',
                top: Math.max(0, rect.top - 28) + 'px',
            });
        }, false);
        listen('mouseout', () => {
            box.style.display = 'none';
            label.style.display = 'none';
        }, false);
    } else if (args.mode === 'select' || args.mode === 'style') {
        listen('click', (e) => {
            const target = e.target;
            if (!(target instanceof Element) || isEngineNode(target)) return;
            e.preventDefault();
            e.stopPropagation();
            const selected = !target.hasAttribute(MARKER);
            setMarker(target, selected, args.selectionColor);
            if (typeof window.__pageshaperSelection === 'function') {
                window.__pageshaperSelection(addressOf(target), selected);
            }
        }, true);
    }
    return state.listeners.length;
""")

SET_MARKER_JS = _script(r"""
    const el = resolveAddress(args.address);
    if (!el) return false;
    setMarker(el, args.selected, args.selectionColor);
    return true;
""")

CLEAR_MARKERS_JS = _script(r"""
    const marked = Array.from(document.querySelectorAll('[' + MARKER + ']'));
    for (const el of marked) setMarker(el, false, '');
    return marked.length;
""")

APPLY_RULE_JS = _script(r"""
    const rule = args.rule;
    const targets = resolveTarget(args.target);
    let destination = null;
    if (rule.kind === 'move') {
        destination = document.querySelector(rule.destination);
        if (!destination) return 0;
    }

    // after the first move, later targets follow the previous one so
    // multiple targets keep their relative order
    let cursor = null;
    let applied = 0;
    for (const el of targets) {
        switch (rule.kind) {
            case 'hide':
                el.style.display = 'none';
                break;
            case 'remove':
                el.remove();
                break;
            case 'highlight':
                el.style.outline = '3px solid ' + rule.color;
                el.style.backgroundColor = rule.background;
                break;
            case 'style':
                applyStyles(el, rule.styles);
                break;
            case 'replace':
                el.innerHTML = rule.html;
                break;
            case 'move':
                if (el === destination || el.contains(destination)) continue;
                if (cursor) cursor.after(el);
                else if (rule.position === 'before') destination.before(el);
                else if (rule.position === 'after') destination.after(el);
                else if (rule.position === 'replace') destination.replaceWith(el);
                else if (rule.position === 'prepend') destination.prepend(el);
                else destination.appendChild(el);
                if (rule.position !== 'before' && rule.position !== 'append') cursor = el;
                break;
            default:
                throw new Error('Unsupported operation: ' + rule.kind);
        }
        applied++;
    }
    return applied;
""")

RESTYLE_MATCHING_JS = _script(r"""
    const c = args.condition;
    const matches = (el) => {
        if (!c) return true;
        const cs = getComputedStyle(el);
        const fontSize = parseFloat(cs.fontSize);
        if (c.minTextLength !== null && (el.textContent || '').trim().length <= c.minTextLength) return false;
        if (c.fontSizeBelow !== null && !(fontSize < c.fontSizeBelow)) return false;
        if (c.lineHeightRatioBelow !== null) {
            const lineHeight = cs.lineHeight === 'normal' ? 1.2 * fontSize : parseFloat(cs.lineHeight);
            if (!(lineHeight / fontSize < c.lineHeightRatioBelow)) return false;
        }
        if (c.spacingAbove !== null
            && !(parseFloat(cs.padding) > c.spacingAbove || parseFloat(cs.margin) > c.spacingAbove)) return false;
        return true;
    };

    let changed = 0;
    for (const el of document.querySelectorAll(args.selector)) {
        if (isEngineNode(el) || !matches(el)) continue;
        applyStyles(el, args.styles);
        changed++;
    }
    return changed;
""")

HIGHLIGHT_ADDRESSES_JS = _script(r"""
    let highlighted = 0;
    for (const address of args.addresses) {
        const el = resolveAddress(address);
        if (!el) continue;
        el.style.outline = '3px solid ' + args.color;
        el.style.backgroundColor = 'rgba(37, 99, 235, 0.1)';
        highlighted++;
    }
    return highlighted;
""")
