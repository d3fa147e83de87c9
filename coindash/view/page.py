"""
Single-page dashboard markup.

The page holds no state of its own: it draws whatever DashboardView the
server pushes over /ws and posts user actions back to the API.
"""

PAGE_HTML = """<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>Crypto Dashboard</title>
  <script src="https://cdn.jsdelivr.net/npm/chart.js"></script>
  <style>
    body { font-family: sans-serif; margin: 2rem; }
    .button, .active-button { margin-right: .5rem; padding: .4rem .8rem; }
    .active-button { font-weight: bold; }
    .suggestions { list-style: none; padding: 0; border: 1px solid #ccc; max-width: 20rem; }
    .suggestion-item { padding: .3rem; cursor: pointer; }
    .price { font-size: 1.6rem; margin: .5rem 0; }
  </style>
</head>
<body>
  <h1 class="header" id="title">Crypto Dashboard</h1>
  <div class="button-container" id="buttons"></div>
  <div class="search-container">
    <input type="text" id="search" class="search-input" placeholder="Search for a coin...">
    <ul class="suggestions" id="suggestions" hidden></ul>
  </div>
  <div class="coin-panel">
    <h2 id="coin-name"></h2>
    <div class="price" id="price"></div>
    <canvas id="chart" width="300" height="150"></canvas>
    <div class="ohlc-data">
      <h3>Open/Close Prices (Last 10 Days)</h3>
      <div id="history"></div>
    </div>
  </div>
<script>
let chart = null;

function post(url, body) {
  return fetch(url, {
    method: "POST",
    headers: {"Content-Type": "application/json"},
    body: body ? JSON.stringify(body) : null,
  });
}

function drawChart(binding) {
  if (!chart) {
    chart = new Chart(document.getElementById("chart"), {
      type: "line",
      data: {labels: [], datasets: [{label: "", data: [], borderColor: "rgba(75, 192, 192, 1)", borderWidth: 2, fill: false}]},
      options: {scales: {
        x: {display: true, title: {display: true, text: "Time"}},
        y: {display: true, title: {display: true, text: "Price in USD"}, ticks: {stepSize: 10}},
      }},
    });
  }
  chart.data.labels = binding.labels;
  chart.data.datasets[0].label = binding.label;
  chart.data.datasets[0].data = binding.values;
  chart.update();
}

function draw(view) {
  const buttons = document.getElementById("buttons");
  buttons.innerHTML = "";
  for (const b of view.buttons) {
    const el = document.createElement("button");
    el.className = b.active ? "active-button" : "button";
    el.textContent = b.name;
    el.onclick = () => post(`/coins/${encodeURIComponent(b.id)}/select`);
    buttons.appendChild(el);
  }

  const list = document.getElementById("suggestions");
  list.innerHTML = "";
  list.hidden = view.search.suggestions.length === 0;
  for (const s of view.search.suggestions) {
    const li = document.createElement("li");
    li.className = "suggestion-item";
    li.textContent = s.label;
    if (!s.not_found) {
      li.onclick = () => post("/coins", {id: s.id, name: s.name, ticker: s.ticker});
    }
    list.appendChild(li);
  }
  const search = document.getElementById("search");
  if (document.activeElement !== search) search.value = view.search.query;

  const panel = view.panels.find(p => p.visible);
  if (!panel) return;
  document.getElementById("coin-name").textContent = panel.name;
  document.getElementById("price").textContent = panel.price_text;
  drawChart(panel.chart);

  const history = document.getElementById("history");
  if (panel.history.message) {
    history.innerHTML = `<p>${panel.history.message}</p>`;
  } else {
    const rows = panel.history.rows.map(
      r => `<tr><td>${r.date}</td><td>${r.open}</td><td>${r.close}</td></tr>`
    ).join("");
    history.innerHTML = `<table><thead><tr><th>Date</th><th>Open (USD)</th><th>Close (USD)</th></tr></thead><tbody>${rows}</tbody></table>`;
  }
}

document.getElementById("search").addEventListener("input", e => {
  post(`/search?query=${encodeURIComponent(e.target.value)}`);
});

function connect() {
  const proto = location.protocol === "https:" ? "wss" : "ws";
  const ws = new WebSocket(`${proto}://${location.host}/ws`);
  ws.onmessage = msg => draw(JSON.parse(msg.data));
  ws.onclose = () => setTimeout(connect, 2000);
}
connect();
</script>
</body>
</html>
"""
