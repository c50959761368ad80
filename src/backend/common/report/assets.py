"""Inlined stylesheet and viewer script for the HTML report.

The script mirrors `common.report.viewer`: one frozen state object, a
`reduce(state, action)` function and a `render()` pass that applies chips,
search, card visibility, pagination and highlighting in that order.
"""

REPORT_CSS = """
:root{
  --bg:#0f1420;--fg:#e6e9ef;--muted:#a8b0bf;
  --card:#141a2a;--card2:#1a2135;--border:#2b3a57;--chip:#24314d;--mark:#ffe58a;
  --ok:#27c93f;--warn:#f5a524;--err:#ff6b6b;--badge:#2a3553;
  --thead:#173052;--theadTxt:#dfe8ff;--tableOdd:#121a2b;--tableEven:#0f1727;
  --shadow:0 10px 24px rgba(0,0,0,.35);
}
body.light{
  --bg:#f7f9fc;--fg:#1d2636;--muted:#526079;
  --card:#ffffff;--card2:#f1f5fb;--border:#d8e0ef;--chip:#e8eef9;--mark:#fff2a6;
  --ok:#16a34a;--warn:#d97706;--err:#ef4444;--badge:#e9eefb;
  --thead:#e5efff;--theadTxt:#1f2b49;--tableOdd:#ffffff;--tableEven:#f6f9ff;
  --shadow:0 8px 16px rgba(16,24,40,.08);
}
html,body{height:100%;}
body{background:var(--bg);color:var(--fg);font:14px/1.45 system-ui,Segoe UI,Roboto,Arial,sans-serif;margin:16px;}
h1{margin:0 0 6px;font-size:24px;}
.muted{color:var(--muted);}
mark.hl{background:var(--mark);color:#111;border-radius:2px;}
#headerDock{position:fixed;top:12px;left:12px;right:12px;z-index:996;background:var(--bg);
  border:1px solid var(--border);border-radius:12px;box-shadow:var(--shadow);}
#headerDock .toolbar{margin:10px 12px;}
body.has-header-offset{padding-top:calc(var(--headerH,0px) + 16px);}
section.rule{scroll-margin-top:calc(var(--headerH,0px) + 20px);}
.toolbar{display:flex;align-items:center;gap:10px;flex-wrap:wrap;}
.toolbar .input{flex:1 1 120px;min-width:100px;}
.toolbar .group{flex:0 0 auto;display:flex;align-items:center;gap:8px;background:var(--card2);
  border:1px solid var(--border);padding:6px 8px;border-radius:12px;}
.toolbar .group.export{margin-left:auto;}
.toolbar .group-title{font-size:12px;font-weight:700;text-transform:uppercase;letter-spacing:.04em;opacity:.8;}
.toolbar .divider{align-self:stretch;width:1px;background:var(--border);margin:0 6px;}
.btn,.chip,.select,.input{background:var(--card2);border:1px solid var(--border);color:var(--fg);
  border-radius:10px;padding:7px 10px;font-size:13px;}
.btn{cursor:pointer;box-shadow:var(--shadow);}
.chip{display:inline-flex;gap:6px;align-items:center;cursor:pointer;user-select:none;background:var(--chip);opacity:.55;}
.chip.active{opacity:1;outline:2px solid var(--border);}
.dot{width:9px;height:9px;border-radius:50%;display:inline-block;}
.ok{background:var(--ok);}.warn{background:var(--warn);}.err{background:var(--err);}
.tag{font-size:12px;padding:2px 6px;border-radius:999px;background:var(--badge);}
.sr-only{position:absolute;width:1px;height:1px;padding:0;margin:-1px;overflow:hidden;clip:rect(0,0,0,0);white-space:nowrap;border:0;}
.summary{display:grid;gap:10px;grid-template-columns:repeat(6,minmax(140px,1fr));margin:8px 0 14px;}
.card{background:var(--card);border:1px solid var(--border);border-radius:12px;padding:10px 12px;box-shadow:var(--shadow);}
.big{font-size:18px;font-weight:700;}
.pill{display:inline-flex;gap:6px;align-items:center;padding:2px 8px;border-radius:999px;background:var(--badge);}
.rule{background:var(--card);border:1px solid var(--border);border-radius:12px;margin:16px 0;box-shadow:var(--shadow);}
.rule-hd{padding:12px 14px;border-bottom:1px solid var(--border);display:flex;align-items:center;gap:10px;}
.rule-title{font-size:18px;font-weight:700;margin-right:auto;}
.status-badge{padding:2px 10px;border-radius:999px;font-weight:700;background:var(--badge);}
.status-badge.ok{border:1px solid var(--ok);background:var(--badge);}
.status-badge.warn{border:1px solid var(--warn);background:var(--badge);}
.status-badge.err{border:1px solid var(--err);background:var(--badge);}
.rule-desc{padding:8px 14px;color:var(--muted);}
details.rule-body{padding:0 0 10px;}
.sec{margin:10px 14px 16px;border:1px solid var(--border);border-radius:10px;overflow:hidden;}
.sec-h{background:var(--thead);color:var(--theadTxt);padding:8px 12px;font-weight:700;}
table{border-collapse:collapse;width:100%;}
thead th{background:var(--thead);color:var(--theadTxt);padding:8px;text-align:left;border-bottom:1px solid var(--border);}
tbody td{border-bottom:1px solid var(--border);padding:8px;vertical-align:top;}
tbody tr:nth-child(odd){background:var(--tableOdd);}
tbody tr:nth-child(even){background:var(--tableEven);}
.lvl{font-weight:700;}
.lvl.info{color:var(--ok);}.lvl.warning{color:var(--warn);}.lvl.error{color:var(--err);}
.why{font-size:12px;color:var(--muted);margin-top:6px;border-left:2px solid var(--border);padding-left:8px;}
.pager{display:flex;gap:6px;align-items:center;padding:10px 12px;background:var(--card2);border-top:1px solid var(--border);}
.pager .spacer{flex:1 1 auto;}
.pager .btn{padding:6px 8px;}
.dropdown{position:relative;}
.dropdown .menu-list{position:absolute;top:calc(100% + 6px);right:0;background:var(--card);border:1px solid var(--border);
  border-radius:12px;padding:6px;min-width:200px;box-shadow:var(--shadow);display:none;z-index:1000;}
.dropdown .menu-list.open{display:block;}
.dropdown .menu-item{display:block;width:100%;text-align:left;border-radius:10px;margin:4px 0;padding:8px 10px;
  background:var(--card2);border:1px solid var(--border);color:var(--fg);cursor:pointer;}
.dropdown .menu-sep{height:1px;background:var(--border);margin:6px 2px;}
@media (max-width:900px){.toolbar .input{flex-basis:100%;min-width:0;}}
@media print{
  #headerDock{display:none;}
  body{background:#fff;color:#000;padding-top:0;}
  .rule{page-break-inside:avoid;}
}
"""

REPORT_SCRIPT = r"""
(function(){
  var CFG = window.REPORT_CONFIG || {rowsPerPage:10, rowsPerPageOptions:[10,25,50,100]};
  var LEVELS = ['error','warning','info'];

  var state = Object.freeze({
    search: '', ruleFilter: '', grouping: 'rule',
    chips: {info:true, warning:true, error:true},
    tables: {}, light: false, expanded: true, menuOpen: false
  });

  function assign(s, patch){ return Object.assign({}, s, patch); }
  function container(grouping){ return document.getElementById('sections-' + grouping); }
  function query(s){ return (s.search || '').trim().toLowerCase(); }
  function tableState(s, id){ return s.tables[id] || {page:1, rpp:CFG.rowsPerPage}; }
  function withTable(s, id, t){
    var tables = Object.assign({}, s.tables); tables[id] = t;
    return assign(s, {tables:tables});
  }
  function pageCount(total, rpp){ return Math.max(1, Math.ceil(total / rpp)); }
  function mainRows(tbl){ return Array.prototype.slice.call(tbl.querySelectorAll('tbody tr.main-row')); }
  function rowPasses(tr, q){ return !q || (tr.getAttribute('data-text') || '').indexOf(q) !== -1; }
  function passingCount(s, tbl){
    var kind = tbl.getAttribute('data-kind');
    if (s.chips[kind] === false) return 0;
    var q = query(s);
    return mainRows(tbl).filter(function(tr){ return rowPasses(tr, q); }).length;
  }
  function resetOutOfRange(s){
    container(s.grouping).querySelectorAll('table.data-table').forEach(function(tbl){
      var t = tableState(s, tbl.id);
      if (t.page > pageCount(passingCount(s, tbl), t.rpp)) s = withTable(s, tbl.id, {page:1, rpp:t.rpp});
    });
    return s;
  }

  function reduce(s, a){
    switch (a.type){
      case 'search': return resetOutOfRange(assign(s, {search:a.term}));
      case 'ruleFilter': return resetOutOfRange(assign(s, {ruleFilter:a.level || ''}));
      case 'chip': {
        var chips = Object.assign({}, s.chips); chips[a.level] = !chips[a.level];
        return resetOutOfRange(assign(s, {chips:chips}));
      }
      case 'grouping': return resetOutOfRange(assign(s, {grouping:a.grouping}));
      case 'page': {
        var tbl = document.getElementById(a.table);
        var t = tableState(s, a.table);
        var pages = pageCount(passingCount(s, tbl), t.rpp);
        var page = Math.min(Math.max(t.page + a.delta, 1), pages);
        return withTable(s, a.table, {page:page, rpp:t.rpp});
      }
      case 'rpp': {
        var tb = document.getElementById(a.table);
        var cur = tableState(s, a.table);
        var p = cur.page > pageCount(passingCount(s, tb), a.rpp) ? 1 : cur.page;
        return withTable(s, a.table, {page:p, rpp:a.rpp});
      }
      case 'theme': return assign(s, {light:!s.light});
      case 'expand': return assign(s, {expanded:true});
      case 'collapse': return assign(s, {expanded:false});
      case 'menu': return assign(s, {menuOpen:!s.menuOpen});
      case 'menuClose': return assign(s, {menuOpen:false});
    }
    return s;
  }

  function dispatch(action){
    state = Object.freeze(reduce(state, action));
    render(action);
  }

  // ---- rendering ----
  function clearHighlights(scope){
    scope.querySelectorAll('mark.hl').forEach(function(m){
      var parent = m.parentNode;
      parent.replaceChild(document.createTextNode(m.textContent), m);
      parent.normalize();
    });
  }
  function highlightNode(node, q){
    Array.prototype.slice.call(node.childNodes).forEach(function(n){
      if (n.nodeType !== 3 || !n.textContent) return;
      var text = n.textContent, lower = text.toLowerCase();
      var idx = lower.indexOf(q), last = 0;
      if (idx === -1) return;
      var frag = document.createDocumentFragment();
      while (idx !== -1){
        frag.appendChild(document.createTextNode(text.slice(last, idx)));
        var mark = document.createElement('mark'); mark.className = 'hl';
        mark.textContent = text.slice(idx, idx + q.length);
        frag.appendChild(mark);
        last = idx + q.length;
        idx = lower.indexOf(q, last);
      }
      frag.appendChild(document.createTextNode(text.slice(last)));
      n.parentNode.replaceChild(frag, n);
    });
  }

  function paginateTable(tbl){
    var t = tableState(state, tbl.id);
    var rows = mainRows(tbl);
    var filtered = rows.filter(function(tr){ return tr.dataset.pass !== '0'; });
    var total = filtered.length;
    var pages = pageCount(total, t.rpp);
    var page = Math.min(Math.max(t.page, 1), pages);
    var start = (page - 1) * t.rpp, end = start + t.rpp;
    rows.forEach(function(tr){ tr.style.display = 'none'; });
    var shown = 0;
    filtered.forEach(function(tr, i){
      if (i >= start && i < end){ tr.style.display = ''; shown++; }
    });
    tbl.querySelectorAll('tbody tr.why-row').forEach(function(why){
      var prev = why.previousElementSibling;
      why.style.display = (prev && prev.style.display === '') ? '' : 'none';
    });
    tbl.setAttribute('data-page', String(page));
    tbl.setAttribute('data-rows', String(t.rpp));
    var pager = tbl.closest('.table-wrap').querySelector('.pager');
    pager.querySelector('.rpp').textContent = String(shown);
    pager.querySelector('.total').textContent = String(total);
    pager.querySelector('.page').textContent = String(page);
    pager.querySelector('.pages').textContent = String(pages);
    var sel = pager.querySelector('select.select');
    if (sel && sel.value !== String(t.rpp)) sel.value = String(t.rpp);
  }

  function applyFilters(){
    var q = query(state);
    ['rule','sheet'].forEach(function(g){ clearHighlights(container(g)); });
    var cont = container(state.grouping);
    cont.querySelectorAll('section.rule').forEach(function(sec){
      var passRule = true;
      if (state.grouping === 'rule' && state.ruleFilter){
        passRule = +(sec.getAttribute('data-count-' + state.ruleFilter) || 0) > 0;
      }
      var hasRows = false;
      sec.querySelectorAll('.sec').forEach(function(block){
        var tbl = block.querySelector('table.data-table');
        var kind = block.getAttribute('data-kind');
        if (!tbl || state.chips[kind] === false){ block.style.display = 'none'; return; }
        var count = 0;
        mainRows(tbl).forEach(function(tr){
          var pass = rowPasses(tr, q);
          tr.dataset.pass = pass ? '1' : '0';
          if (pass) count++;
        });
        block.style.display = count ? '' : 'none';
        if (count) hasRows = true;
        paginateTable(tbl);
      });
      sec.style.display = (passRule && hasRows) ? '' : 'none';
    });
    if (!q) return;
    cont.querySelectorAll('section.rule').forEach(function(sec){
      if (sec.style.display === 'none') return;
      sec.querySelectorAll('.sec').forEach(function(block){
        if (block.style.display === 'none') return;
        block.querySelectorAll('tbody tr.main-row').forEach(function(tr){
          if (tr.style.display === 'none') return;
          tr.querySelectorAll('td').forEach(function(td){ highlightNode(td, q); });
        });
      });
    });
  }

  function render(action){
    document.body.classList.toggle('light', state.light);
    ['rule','sheet'].forEach(function(g){ container(g).style.display = (g === state.grouping) ? '' : 'none'; });
    LEVELS.forEach(function(l){
      var chip = document.getElementById('chip-' + l);
      if (chip) chip.classList.toggle('active', state.chips[l] !== false);
    });
    if (action && (action.type === 'expand' || action.type === 'collapse')){
      document.querySelectorAll('details.rule-body').forEach(function(d){ d.open = state.expanded; });
    }
    var menu = document.getElementById('exportMenu');
    menu.classList.toggle('open', state.menuOpen);
    document.getElementById('btnExport').setAttribute('aria-expanded', state.menuOpen ? 'true' : 'false');
    applyFilters();
  }

  // ---- exports ----
  function cellText(td){ return td ? td.textContent.trim() : ''; }
  function getVisibleRows(){
    var rows = [];
    container(state.grouping).querySelectorAll('section.rule').forEach(function(sec){
      if (sec.style.display === 'none') return;
      sec.querySelectorAll('.sec').forEach(function(block){
        if (block.style.display === 'none') return;
        var tbl = block.querySelector('table.data-table');
        var withRule = tbl.getAttribute('data-with-rule') === '1';
        mainRows(tbl).forEach(function(tr){
          if (tr.dataset.pass === '0') return;
          var td = tr.querySelectorAll('td');
          var off = withRule ? 1 : 0;
          var rec = {idx:cellText(td[0]), source:cellText(td[1]), value:cellText(td[2]), type:cellText(td[3]),
                     target:cellText(td[4]), status:cellText(td[5 + off]), level:cellText(td[6 + off])};
          if (state.grouping === 'rule') rec.ruleId = sec.getAttribute('data-rule');
          else { rec.rule = cellText(td[5]); rec.sheet = sec.getAttribute('data-sheet'); }
          rows.push(rec);
        });
      });
    });
    return rows;
  }
  function download(name, text, mime){
    var blob = new Blob([text], {type:mime || 'text/plain'});
    var a = document.createElement('a');
    a.href = URL.createObjectURL(blob); a.download = name; a.click();
    setTimeout(function(){ URL.revokeObjectURL(a.href); }, 500);
  }
  function csvCell(s){ return '"' + String(s == null ? '' : s).replace(/"/g, '""') + '"'; }

  window.exportIssuesCSV = function(){
    var rows = getVisibleRows().filter(function(r){ return r.level === 'warning' || r.level === 'error'; });
    var head = rows.length ? Object.keys(rows[0]) : ['idx','source','value','type','target','status','level'];
    var lines = [head.map(csvCell).join(',')].concat(rows.map(function(r){
      return head.map(function(k){ return csvCell(r[k]); }).join(',');
    }));
    download('validation_issues.csv', lines.join('\n'), 'text/csv');
  };
  window.exportVisibleJSON = function(){
    download('validation_visible.json', JSON.stringify(getVisibleRows(), null, 2), 'application/json');
  };
  window.copyVisible = function(){
    var text = getVisibleRows().map(function(r){
      return Object.keys(r).map(function(k){ return r[k]; }).join('\t');
    }).join('\n');
    var ok = function(){ alert('Copied visible rows'); };
    var fail = function(){ alert('Clipboard copy failed'); };
    try { navigator.clipboard.writeText(text).then(ok, fail); } catch (e) { fail(); }
  };
  window.printReport = function(){ dispatch({type:'menuClose'}); window.print(); };

  // ---- wiring ----
  window.setSearch = function(el){ dispatch({type:'search', term:el.value}); };
  window.setRuleFilter = function(el){ dispatch({type:'ruleFilter', level:el.value}); };
  window.toggleChip = function(level){ dispatch({type:'chip', level:level}); };
  window.switchGrouping = function(el){ dispatch({type:'grouping', grouping:el.value}); };
  window.chgPage = function(el, delta){
    var tbl = el.closest('.table-wrap').querySelector('table.data-table');
    dispatch({type:'page', table:tbl.id, delta:delta});
  };
  window.setRpp = function(el){
    var tbl = el.closest('.table-wrap').querySelector('table.data-table');
    dispatch({type:'rpp', table:tbl.id, rpp:parseInt(el.value, 10)});
  };
  window.toggleLight = function(){ dispatch({type:'theme'}); };
  window.foldAll = function(){ dispatch({type:'expand'}); };
  window.collapseAll = function(){ dispatch({type:'collapse'}); };
  window.toggleExportMenu = function(e){ if (e) e.stopPropagation(); dispatch({type:'menu'}); };

  document.addEventListener('click', function(e){
    var menu = document.getElementById('exportMenu');
    if (state.menuOpen && menu && !menu.contains(e.target)) dispatch({type:'menuClose'});
  });
  document.addEventListener('keydown', function(e){
    if (e.key === 'Escape' && state.menuOpen) dispatch({type:'menuClose'});
  });

  window.addEventListener('DOMContentLoaded', function(){
    ['rule','sheet'].forEach(function(g){
      container(g).querySelectorAll('section.rule').forEach(function(el, i){ el.dataset.index = String(i); });
    });
    render(null);
    var header = document.getElementById('headerDock');
    if (!header) return;
    var setHeaderOffset = function(){
      document.documentElement.style.setProperty('--headerH', (header.offsetHeight || 0) + 'px');
      document.body.classList.add('has-header-offset');
    };
    setHeaderOffset();
    window.addEventListener('resize', setHeaderOffset);
  });
})();
"""
